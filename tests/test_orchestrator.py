from dominion_ai.models import ActionIntent, DefendAction, ExecutionOutcome, OutcomeStatus
from dominion_ai.orchestrator import TurnOrchestrator, cooldown_for
from dominion_ai.world.state import Agent, GameState, Position


class StubEngine:
    def __init__(self, counts: dict[int, int]) -> None:
        self.counts = counts
        self.calls: list[int] = []

    def generate_decisions(self, world: GameState) -> dict[int, list[ActionIntent]]:
        return {agent_id: self.decide_for_agent(agent_id, world) for agent_id in world.agents}

    def decide_for_agent(self, agent_id: int, world: GameState) -> list[ActionIntent]:
        self.calls.append(agent_id)
        return [DefendAction(position=Position(0, 0), priority=1.0) for _ in range(self.counts.get(agent_id, 0))]


class RecordingExecutor:
    def __init__(self) -> None:
        self.received: list[dict] = []

    def execute_decisions(self, decisions, world: GameState) -> list[ExecutionOutcome]:
        self.received.append(dict(decisions))
        return [ExecutionOutcome(agent_id=agent_id, status=OutcomeStatus.SUCCEEDED, message="ok") for agent_id in decisions]


def make_world(*agent_ids: int) -> GameState:
    return GameState(agents={agent_id: Agent(id=agent_id, name=f"Agent {agent_id}") for agent_id in agent_ids})


def planned_turns(orchestrator: TurnOrchestrator, world: GameState, agent_id: int, turns: int) -> list[bool]:
    planned: list[bool] = []
    for _ in range(turns):
        decisions = orchestrator.generate_turn_decisions(world)
        planned.append(agent_id in decisions)
        world.turn += 1
    return planned


def test_cooldown_table() -> None:
    assert [cooldown_for(count) for count in range(7)] == [0, 0, 1, 1, 2, 2, 2]


def test_single_action_agents_plan_every_turn() -> None:
    orchestrator = TurnOrchestrator(StubEngine({1: 1}))

    assert planned_turns(orchestrator, make_world(1), 1, 4) == [True, True, True, True]


def test_two_actions_skip_one_turn() -> None:
    orchestrator = TurnOrchestrator(StubEngine({1: 2}))

    assert planned_turns(orchestrator, make_world(1), 1, 6) == [True, False, True, False, True, False]


def test_four_actions_skip_two_turns() -> None:
    orchestrator = TurnOrchestrator(StubEngine({1: 5}))

    assert planned_turns(orchestrator, make_world(1), 1, 6) == [True, False, False, True, False, False]


def test_agents_on_cooldown_cost_no_planning() -> None:
    engine = StubEngine({1: 4, 2: 1})
    orchestrator = TurnOrchestrator(engine)
    world = make_world(1, 2)

    orchestrator.generate_turn_decisions(world)
    orchestrator.generate_turn_decisions(world)
    orchestrator.generate_turn_decisions(world)

    assert engine.calls.count(1) == 1
    assert engine.calls.count(2) == 3
    assert orchestrator.cooldown(1) == 0


def test_empty_results_are_omitted_and_set_no_cooldown() -> None:
    engine = StubEngine({1: 0})
    orchestrator = TurnOrchestrator(engine)
    world = make_world(1)

    assert orchestrator.generate_turn_decisions(world) == {}
    assert orchestrator.generate_turn_decisions(world) == {}
    assert engine.calls == [1, 1]
    assert orchestrator.cooldown(1) == 0


def test_execute_decisions_delegates_to_executor() -> None:
    executor = RecordingExecutor()
    orchestrator = TurnOrchestrator(StubEngine({1: 1}), executor=executor)
    world = make_world(1)

    decisions = orchestrator.generate_turn_decisions(world)
    outcomes = orchestrator.execute_decisions(decisions, world)

    assert executor.received == [decisions]
    assert [outcome.agent_id for outcome in outcomes] == [1]


def test_reset_clears_cooldowns() -> None:
    orchestrator = TurnOrchestrator(StubEngine({1: 4}))
    world = make_world(1)
    orchestrator.generate_turn_decisions(world)

    orchestrator.reset()

    assert orchestrator.cooldown(1) == 0
    assert 1 in orchestrator.generate_turn_decisions(world)


def test_departed_agents_drop_their_cooldown() -> None:
    orchestrator = TurnOrchestrator(StubEngine({1: 4, 2: 4}))
    world = make_world(1, 2)
    orchestrator.generate_turn_decisions(world)
    assert orchestrator.cooldown(2) == 2

    del world.agents[2]
    orchestrator.generate_turn_decisions(world)

    assert orchestrator.cooldown(2) == 0
    assert 2 not in orchestrator.cooldowns
