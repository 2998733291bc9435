from dominion_ai.models import (
    AttackAction,
    BuildBuildingAction,
    BuildUnitAction,
    DefendAction,
    DiplomacyAction,
    DiplomaticAction,
    ExpandAction,
    ResearchAction,
    TradeAction,
)
from dominion_ai.planning.htn import (
    HasAllies,
    HasEnemies,
    HasGold,
    HasMilitaryStrength,
    HasTechnology,
    HtnPlanner,
    HtnTask,
    Method,
    PrimitiveAction,
    TurnGreaterThan,
)
from dominion_ai.world.state import (
    Agent,
    City,
    DiplomaticRelation,
    Economy,
    GameState,
    Military,
    Position,
    Treaty,
    TreatyKind,
)


def make_agent(
    agent_id: int,
    *,
    gold: float = 100.0,
    strength: float = 0.0,
    capital: Position | None = Position(10, 10),
    cities: int = 1,
) -> Agent:
    return Agent(
        id=agent_id,
        name=f"Agent {agent_id}",
        economy=Economy(gold=gold),
        military=Military(total_strength=strength),
        capital=capital,
        cities=[City(name=f"City {agent_id}-{index}", position=Position(10, 10)) for index in range(cities)],
    )


def make_world(*agents: Agent, turn: int = 5) -> GameState:
    return GameState(turn=turn, agents={agent.id: agent for agent in agents})


def test_first_applicable_method_wins_against_pre_decomposition_state() -> None:
    networks = {
        HtnTask.CONQUEST_CAMPAIGN: (
            Method(name="arm_first", preconditions=(HasGold(50.0),), subtasks=(PrimitiveAction.BUILD_ARMY,)),
            Method(
                name="defend_when_strong",
                preconditions=(HasMilitaryStrength(10.0),),
                subtasks=(PrimitiveAction.DEFEND_TERRITORY,),
            ),
        ),
    }
    planner = HtnPlanner(networks)
    world = make_world(make_agent(1, gold=100.0, strength=0.0))

    actions = planner.decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, world)

    assert planner.select_method(1, HtnTask.CONQUEST_CAMPAIGN, world).name == "arm_first"
    assert actions is not None
    assert len(actions) == 1
    assert isinstance(actions[0], BuildUnitAction)


def test_earlier_method_preferred_even_when_later_one_qualifies() -> None:
    attacker = make_agent(1, gold=150.0, strength=60.0)
    victim = make_agent(2, strength=10.0, capital=Position(30, 30))
    world = make_world(attacker, victim)

    actions = HtnPlanner().decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, world)

    assert actions is not None
    assert [type(action) for action in actions] == [BuildUnitAction, ResearchAction, AttackAction]
    assert actions[2].target == 2
    assert actions[2].target_position == Position(30, 30)
    assert actions[2].priority == 0.9


def test_preparation_phase_expands_nested_economic_development() -> None:
    world = make_world(make_agent(1, gold=40.0), make_agent(2, capital=Position(20, 20)))

    actions = HtnPlanner().decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, world)

    assert actions is not None
    assert [type(action) for action in actions] == [
        BuildUnitAction,
        BuildBuildingAction,
        BuildBuildingAction,
        TradeAction,
        ExpandAction,
    ]


def test_declare_war_without_weak_target_contributes_nothing() -> None:
    world = make_world(make_agent(1, gold=150.0, strength=60.0), make_agent(2, strength=50.0))

    actions = HtnPlanner().decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, world)

    assert actions is not None
    assert [type(action) for action in actions] == [BuildUnitAction, ResearchAction]


def test_declare_war_skips_target_without_capital() -> None:
    world = make_world(make_agent(1, gold=150.0, strength=60.0), make_agent(2, strength=5.0, capital=None))

    actions = HtnPlanner().decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, world)

    assert actions is not None
    assert not any(isinstance(action, AttackAction) for action in actions)


def test_cyclic_compound_tasks_are_cut_off() -> None:
    networks = {
        HtnTask.CONQUEST_CAMPAIGN: (
            Method(
                name="loop_a",
                preconditions=(),
                subtasks=(PrimitiveAction.BUILD_ARMY, HtnTask.ECONOMIC_DEVELOPMENT),
            ),
        ),
        HtnTask.ECONOMIC_DEVELOPMENT: (
            Method(
                name="loop_b",
                preconditions=(),
                subtasks=(PrimitiveAction.BUILD_INFRASTRUCTURE, HtnTask.CONQUEST_CAMPAIGN),
            ),
        ),
    }

    actions = HtnPlanner(networks).decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, make_world(make_agent(1)))

    assert actions is not None
    assert [type(action) for action in actions] == [BuildUnitAction, BuildBuildingAction]


def test_max_depth_limits_nesting() -> None:
    networks = {
        HtnTask.CONQUEST_CAMPAIGN: (
            Method(name="a", preconditions=(), subtasks=(PrimitiveAction.BUILD_ARMY, HtnTask.ECONOMIC_DEVELOPMENT)),
        ),
        HtnTask.ECONOMIC_DEVELOPMENT: (
            Method(
                name="b",
                preconditions=(),
                subtasks=(PrimitiveAction.DEFEND_TERRITORY, HtnTask.TECHNOLOGICAL_ADVANCEMENT),
            ),
        ),
        HtnTask.TECHNOLOGICAL_ADVANCEMENT: (
            Method(name="c", preconditions=(), subtasks=(PrimitiveAction.BUILD_INFRASTRUCTURE,)),
        ),
    }

    shallow = HtnPlanner(networks, max_depth=2).decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, make_world(make_agent(1)))
    deep = HtnPlanner(networks).decompose_task(1, HtnTask.CONQUEST_CAMPAIGN, make_world(make_agent(1)))

    assert [type(action) for action in shallow] == [BuildUnitAction, DefendAction]
    assert [type(action) for action in deep] == [BuildUnitAction, DefendAction, BuildBuildingAction]


def test_defensive_preparation_requires_enemies() -> None:
    world = make_world(make_agent(1), make_agent(2), make_agent(3))
    planner = HtnPlanner()

    assert planner.decompose_task(1, HtnTask.DEFENSIVE_PREPARATION, world) is None

    world.diplomacy.add_relation(DiplomaticRelation(agent_a=2, agent_b=1, relation_value=-40))
    world.diplomacy.add_relation(DiplomaticRelation(agent_a=1, agent_b=3, relation_value=55))
    actions = planner.decompose_task(1, HtnTask.DEFENSIVE_PREPARATION, world)

    assert actions is not None
    assert [type(action) for action in actions] == [BuildUnitAction, DefendAction, DiplomacyAction]
    assert actions[2].target == 3
    assert actions[2].action == DiplomaticAction.PROPOSE_ALLIANCE


def test_war_treaty_counts_as_enemy() -> None:
    world = make_world(make_agent(1), make_agent(2))
    world.diplomacy.add_relation(
        DiplomaticRelation(agent_a=1, agent_b=2, relation_value=10, treaties=[Treaty(kind=TreatyKind.WAR)])
    )

    assert HasEnemies().holds(1, world.agents[1], world)
    assert not HasAllies().holds(1, world.agents[1], world)


def test_diplomatic_campaign_waits_for_turn_and_partners() -> None:
    planner = HtnPlanner()
    early = make_world(make_agent(1), make_agent(2), turn=10)
    alone = make_world(make_agent(1), turn=11)
    ready = make_world(make_agent(1), make_agent(2), turn=11)

    assert planner.decompose_task(1, HtnTask.DIPLOMATIC_CAMPAIGN, early) is None
    assert planner.decompose_task(1, HtnTask.DIPLOMATIC_CAMPAIGN, alone) is None
    actions = planner.decompose_task(1, HtnTask.DIPLOMATIC_CAMPAIGN, ready)
    assert actions is not None
    assert [type(action) for action in actions] == [TradeAction]


def test_conditions_read_agent_state() -> None:
    agent = make_agent(1, gold=49.0)
    agent.technologies.add("Writing")
    world = make_world(agent, turn=3)

    assert not HasGold(50.0).holds(1, agent, world)
    assert HasTechnology("Writing").holds(1, agent, world)
    assert not TurnGreaterThan(3).holds(1, agent, world)
    assert TurnGreaterThan(2).holds(1, agent, world)


def test_unknown_agent_has_no_decomposition() -> None:
    assert HtnPlanner().decompose_task(5, HtnTask.ECONOMIC_DEVELOPMENT, make_world(make_agent(1))) is None
