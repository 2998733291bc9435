from dominion_ai.execution import ActionExecutor
from dominion_ai.models import (
    AttackAction,
    BuildBuildingAction,
    BuildUnitAction,
    DefendAction,
    DiplomacyAction,
    DiplomaticAction,
    ExpandAction,
    ExploreAction,
    OutcomeStatus,
    ResearchAction,
    TradeAction,
)
from dominion_ai.world.state import (
    Agent,
    BuildingType,
    City,
    DiplomaticRelation,
    Economy,
    GameState,
    MapTile,
    Military,
    MilitaryUnit,
    Position,
    ProposalKind,
    Resource,
    TreatyKind,
    UnitType,
)


def make_agent(agent_id: int, *, gold: float = 100.0, cities: list[str] | None = None) -> Agent:
    return Agent(
        id=agent_id,
        name=f"Agent {agent_id}",
        economy=Economy(gold=gold, income=10.0, expenses=5.0),
        capital=Position(10 * agent_id, 10),
        cities=[City(name=name, position=Position(10 * agent_id, 10)) for name in (cities or [])],
    )


def make_world(*agents: Agent) -> GameState:
    return GameState(turn=7, agents={agent.id: agent for agent in agents})


def test_expand_onto_unowned_tile_claims_it() -> None:
    world = make_world(make_agent(1))
    target = Position(11, 10)

    outcomes = ActionExecutor().execute_decisions({1: [ExpandAction(target, 0.5)]}, world)

    assert outcomes[0].status is OutcomeStatus.SUCCEEDED
    assert world.world_map.get_tile(target).owner == 1
    assert len(world.agents[1].territories) == 1
    assert world.agents[1].territories[0].position == target


def test_expand_rejects_owned_and_out_of_bounds_tiles() -> None:
    world = make_world(make_agent(1))
    world.world_map.tiles[Position(11, 10)] = MapTile(owner=2)
    executor = ActionExecutor()

    owned = executor.execute(1, ExpandAction(Position(11, 10), 0.5), world)
    outside = executor.execute(1, ExpandAction(Position(-1, 10), 0.5), world)

    assert owned.status is OutcomeStatus.FAILED
    assert "already owned" in owned.message
    assert outside.status is OutcomeStatus.FAILED
    assert "invalid" in outside.message.lower()
    assert world.agents[1].territories == []


def test_research_with_insufficient_gold_fails_and_keeps_gold() -> None:
    world = make_world(make_agent(1, gold=40.0))

    outcome = ActionExecutor().execute(1, ResearchAction("Writing", 0.5), world)

    assert outcome.status is OutcomeStatus.FAILED
    assert "insufficient gold" in outcome.message.lower()
    assert world.agents[1].economy.gold == 40.0
    assert "Writing" not in world.agents[1].technologies


def test_research_debits_gold_and_learns_technology() -> None:
    world = make_world(make_agent(1, gold=75.0))

    outcome = ActionExecutor().execute(1, ResearchAction("Writing", 0.5), world)

    assert outcome.succeeded
    assert world.agents[1].economy.gold == 25.0
    assert "Writing" in world.agents[1].technologies


def test_research_for_missing_agent_fails() -> None:
    outcome = ActionExecutor().execute(3, ResearchAction("Writing", 0.5), make_world(make_agent(1)))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.message == "Agent not found"


def test_build_unit_with_exact_gold() -> None:
    world = make_world(make_agent(1, gold=30.0))
    agent = world.agents[1]
    agent.military = Military(total_strength=12.0)

    outcome = ActionExecutor().execute(1, BuildUnitAction(UnitType.INFANTRY, Position(10, 10), 0.5), world)

    assert outcome.succeeded
    assert agent.economy.gold == 0.0
    assert len(agent.military.units) == 1
    assert agent.military.units[0].strength == 10.0
    assert agent.military.total_strength == 22.0


def test_unit_ids_are_unique_across_agents() -> None:
    world = make_world(make_agent(1, gold=200.0), make_agent(2, gold=200.0))
    world.agents[2].military.units.append(
        MilitaryUnit(id=7, owner=2, unit_type=UnitType.ARCHER, position=Position(20, 10), strength=10.0)
    )
    build = BuildUnitAction(UnitType.INFANTRY, Position(0, 0), 0.5)

    ActionExecutor().execute_decisions({1: [build, build], 2: [build]}, world)

    ids = [unit.id for agent in world.agents.values() for unit in agent.military.units]
    assert len(ids) == len(set(ids)) == 4
    assert [unit.id for unit in world.agents[1].military.units] == [8, 9]


def test_build_building_goes_into_first_city() -> None:
    world = make_world(make_agent(1, gold=30.0, cities=["Alpha", "Beta"]))

    outcome = ActionExecutor().execute(1, BuildBuildingAction(BuildingType.LIBRARY, Position(99, 40), 0.5), world)

    assert outcome.succeeded
    assert world.agents[1].economy.gold == 5.0
    assert world.agents[1].cities[0].has_building(BuildingType.LIBRARY)
    assert world.agents[1].cities[1].buildings == []


def test_build_building_without_city_keeps_gold() -> None:
    world = make_world(make_agent(1, gold=30.0))

    outcome = ActionExecutor().execute(1, BuildBuildingAction(BuildingType.MARKET, Position(10, 10), 0.5), world)

    assert outcome.status is OutcomeStatus.FAILED
    assert world.agents[1].economy.gold == 30.0


def test_trade_with_missing_partner_fails() -> None:
    world = make_world(make_agent(1))

    outcome = ActionExecutor().execute(1, TradeAction(partner=9, resource=Resource.GOLD, priority=0.5), world)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.message.lower() == "trade partner not found"
    assert world.agents[1].economy.trade_routes == []
    assert world.agents[1].economy.income == 10.0


def test_trade_creates_route_and_raises_income() -> None:
    partner = make_agent(2)
    partner.capital = None
    world = make_world(make_agent(1), partner)

    outcome = ActionExecutor().execute(1, TradeAction(partner=2, resource=Resource.GOLD, priority=0.5), world)

    route = world.agents[1].economy.trade_routes[0]
    assert outcome.succeeded
    assert route.origin == Position(10, 10)
    assert route.destination == Position(60, 25)
    assert route.value == 10.0
    assert route.security == 0.8
    assert world.agents[1].economy.income == 15.0


def test_attack_worsens_relation_and_records_war() -> None:
    world = make_world(make_agent(1), make_agent(2))
    world.diplomacy.add_relation(DiplomaticRelation(agent_a=2, agent_b=1, relation_value=20))

    outcome = ActionExecutor().execute(1, AttackAction(target=2, target_position=Position(20, 10), priority=0.9), world)

    relation = world.diplomacy.relation_between(1, 2)
    assert outcome.succeeded
    assert relation.relation_value == -30
    assert relation.treaties[-1].kind == TreatyKind.WAR
    assert relation.treaties[-1].started_turn == 7


def test_attack_without_relation_still_reports_success() -> None:
    world = make_world(make_agent(1), make_agent(2))

    outcome = ActionExecutor().execute(1, AttackAction(target=2, target_position=Position(20, 10), priority=0.9), world)

    assert outcome.succeeded
    assert world.diplomacy.relations == {}


def test_diplomacy_records_negotiation() -> None:
    world = make_world(make_agent(1), make_agent(2))
    executor = ActionExecutor()

    executor.execute(1, DiplomacyAction(target=2, action=DiplomaticAction.PROPOSE_ALLIANCE, priority=0.7), world)
    outcome = executor.execute(1, DiplomacyAction(target=2, action=DiplomaticAction.BREAK_TREATY, priority=0.7), world)

    negotiations = world.diplomacy.ongoing_negotiations
    assert outcome.succeeded
    assert [negotiation.proposal for negotiation in negotiations] == [ProposalKind.ALLIANCE, ProposalKind.TRADE_PACT]
    assert all(negotiation.turns_remaining == 3 for negotiation in negotiations)


def test_defend_moves_only_nearby_units() -> None:
    world = make_world(make_agent(1))
    near = MilitaryUnit(id=1, owner=1, unit_type=UnitType.INFANTRY, position=Position(13, 13), strength=10.0)
    far = MilitaryUnit(id=2, owner=1, unit_type=UnitType.INFANTRY, position=Position(20, 20), strength=10.0)
    world.agents[1].military.units.extend([near, far])

    outcome = ActionExecutor().execute(1, DefendAction(position=Position(10, 10), priority=1.0), world)

    assert outcome.succeeded
    assert near.position == Position(10, 10)
    assert far.position == Position(20, 20)


def test_defend_for_missing_agent_fails() -> None:
    outcome = ActionExecutor().execute(4, DefendAction(position=Position(1, 1), priority=1.0), make_world())

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.message == "Agent not found"


def test_explore_requires_units() -> None:
    world = make_world(make_agent(1))
    executor = ActionExecutor()

    failed = executor.execute(1, ExploreAction(Position(15, 10), 0.5), world)
    world.agents[1].military.units.append(
        MilitaryUnit(id=1, owner=1, unit_type=UnitType.CAVALRY, position=Position(10, 10), strength=10.0)
    )
    succeeded = executor.execute(1, ExploreAction(Position(15, 10), 0.5), world)

    assert failed.status is OutcomeStatus.FAILED
    assert failed.message == "No units available for exploration"
    assert succeeded.succeeded


def test_execute_decisions_returns_one_outcome_per_intent_in_order() -> None:
    world = make_world(make_agent(1, gold=60.0), make_agent(2, gold=10.0))
    decisions = {
        1: [ResearchAction("Writing", 0.6), ResearchAction("Mathematics", 0.5)],
        2: [BuildUnitAction(UnitType.INFANTRY, Position(20, 10), 0.5)],
    }

    outcomes = ActionExecutor().execute_decisions(decisions, world)

    assert [(outcome.agent_id, outcome.succeeded) for outcome in outcomes] == [(1, True), (1, False), (2, False)]
