"""Applies action intents to mutable world state and reports outcomes."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from dominion_ai.constants import (
    BUILDING_COST,
    DEFAULT_CAPITAL,
    DEFAULT_PARTNER_CAPITAL,
    DEFEND_RADIUS,
    NEGOTIATION_TURNS,
    RESEARCH_COST,
    TERRITORY_CONTROL_STRENGTH,
    TRADE_INCOME_BONUS,
    TRADE_ROUTE_SECURITY,
    TRADE_ROUTE_VALUE,
    UNIT_COST,
    UNIT_STRENGTH,
    WAR_RELATION_PENALTY,
)
from dominion_ai.models import (
    ActionIntent,
    AttackAction,
    BuildBuildingAction,
    BuildUnitAction,
    DefendAction,
    DiplomacyAction,
    DiplomaticAction,
    ExecutionOutcome,
    ExpandAction,
    ExploreAction,
    OutcomeStatus,
    ResearchAction,
    TradeAction,
)
from dominion_ai.world.state import (
    Building,
    GameState,
    MilitaryUnit,
    Negotiation,
    Position,
    ProposalKind,
    Territory,
    TradeRoute,
    Treaty,
    TreatyKind,
)

_PROPOSALS: dict[DiplomaticAction, ProposalKind] = {
    DiplomaticAction.PROPOSE_ALLIANCE: ProposalKind.ALLIANCE,
    DiplomaticAction.PROPOSE_NON_AGGRESSION: ProposalKind.NON_AGGRESSION_PACT,
    DiplomaticAction.PROPOSE_TRADE_PACT: ProposalKind.TRADE_PACT,
    DiplomaticAction.MAKE_PEACE: ProposalKind.PEACE_TREATY,
}


def _succeeded(agent_id: int, message: str) -> ExecutionOutcome:
    return ExecutionOutcome(agent_id=agent_id, status=OutcomeStatus.SUCCEEDED, message=message)


def _failed(agent_id: int, message: str) -> ExecutionOutcome:
    return ExecutionOutcome(agent_id=agent_id, status=OutcomeStatus.FAILED, message=message)


def _format(position: Position) -> str:
    return f"({position.x}, {position.y})"


class ActionExecutor:
    """Serial executor for one game session; owns the unit id sequence."""

    def __init__(self, *, first_unit_id: int = 1, logger: logging.Logger | None = None) -> None:
        self._next_unit_id = first_unit_id
        self._logger = logger or logging.getLogger("dominion_ai.execution")

    def execute_decisions(
        self,
        decisions: Mapping[int, Sequence[ActionIntent]],
        world: GameState,
    ) -> list[ExecutionOutcome]:
        """Apply every intent in order and return one outcome per intent."""
        outcomes: list[ExecutionOutcome] = []
        for agent_id, actions in decisions.items():
            for action in actions:
                outcome = self.execute(agent_id, action, world)
                outcomes.append(outcome)
                self._logger.debug(
                    "action_executed",
                    extra={
                        "agent_id": agent_id,
                        "kind": action.kind.value,
                        "status": outcome.status.value,
                        "detail": outcome.message,
                    },
                )
        return outcomes

    def execute(self, agent_id: int, action: ActionIntent, world: GameState) -> ExecutionOutcome:
        if isinstance(action, ExpandAction):
            return self._expand(agent_id, action, world)
        if isinstance(action, ResearchAction):
            return self._research(agent_id, action, world)
        if isinstance(action, BuildUnitAction):
            return self._build_unit(agent_id, action, world)
        if isinstance(action, BuildBuildingAction):
            return self._build_building(agent_id, action, world)
        if isinstance(action, TradeAction):
            return self._trade(agent_id, action, world)
        if isinstance(action, AttackAction):
            return self._attack(agent_id, action, world)
        if isinstance(action, DiplomacyAction):
            return self._diplomacy(agent_id, action, world)
        if isinstance(action, DefendAction):
            return self._defend(agent_id, action, world)
        if isinstance(action, ExploreAction):
            return self._explore(agent_id, action, world)
        raise TypeError(f"Unsupported action intent: {type(action).__name__}")

    def allocate_unit_id(self, world: GameState) -> int:
        """Next unit id, always above every id already present in ``world``."""
        existing = [unit.id for agent in world.agents.values() for unit in agent.military.units]
        unit_id = max([self._next_unit_id, *(value + 1 for value in existing)])
        self._next_unit_id = unit_id + 1
        return unit_id

    def _expand(self, agent_id: int, action: ExpandAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")

        target = action.target_position
        tile = world.world_map.tile_mut(target)
        if tile is None:
            return _failed(agent_id, f"Invalid expansion position {_format(target)}")
        if tile.owner is not None:
            return _failed(agent_id, f"Tile {_format(target)} is already owned")

        tile.owner = agent_id
        agent.territories.append(
            Territory(
                position=target,
                owner=agent_id,
                control_strength=TERRITORY_CONTROL_STRENGTH,
                terrain=tile.terrain,
            )
        )
        return _succeeded(agent_id, f"Expanded to {_format(target)}")

    def _research(self, agent_id: int, action: ResearchAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")
        if agent.economy.gold < RESEARCH_COST:
            return _failed(agent_id, "Insufficient gold for research")

        agent.economy.gold -= RESEARCH_COST
        agent.technologies.add(action.technology)
        return _succeeded(agent_id, f"Researched {action.technology}")

    def _build_unit(self, agent_id: int, action: BuildUnitAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")
        if agent.economy.gold < UNIT_COST:
            return _failed(agent_id, "Insufficient gold for unit")

        agent.economy.gold -= UNIT_COST
        unit = MilitaryUnit(
            id=self.allocate_unit_id(world),
            owner=agent_id,
            unit_type=action.unit_type,
            position=action.position,
            strength=UNIT_STRENGTH,
        )
        agent.military.units.append(unit)
        agent.military.total_strength += unit.strength
        return _succeeded(agent_id, f"Built {action.unit_type.value} at {_format(action.position)}")

    def _build_building(self, agent_id: int, action: BuildBuildingAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")
        if not agent.cities:
            return _failed(agent_id, "No city found for building")
        if agent.economy.gold < BUILDING_COST:
            return _failed(agent_id, "Insufficient gold for building")

        # Always the first city; the requested position is ignored.
        city = agent.cities[0]
        agent.economy.gold -= BUILDING_COST
        city.buildings.append(Building(building_type=action.building_type, level=1))
        return _succeeded(agent_id, f"Built {action.building_type.value} in {city.name}")

    def _trade(self, agent_id: int, action: TradeAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")
        partner = world.agents.get(action.partner)
        if partner is None:
            return _failed(agent_id, "Trade partner not found")

        route = TradeRoute(
            origin=agent.capital or Position(*DEFAULT_CAPITAL),
            destination=partner.capital or Position(*DEFAULT_PARTNER_CAPITAL),
            value=TRADE_ROUTE_VALUE,
            security=TRADE_ROUTE_SECURITY,
        )
        agent.economy.trade_routes.append(route)
        agent.economy.income += TRADE_INCOME_BONUS
        return _succeeded(agent_id, f"Established trade with agent {partner.id}")

    def _attack(self, agent_id: int, action: AttackAction, world: GameState) -> ExecutionOutcome:
        relation = world.diplomacy.relation_between(agent_id, action.target)
        if relation is None:
            self._logger.warning(
                "attack_without_relation",
                extra={"agent_id": agent_id, "target": action.target, "turn": world.turn},
            )
        else:
            relation.relation_value = max(relation.relation_value - WAR_RELATION_PENALTY, -100)
            relation.treaties.append(Treaty(kind=TreatyKind.WAR, started_turn=world.turn))
        return _succeeded(agent_id, f"Declared war on agent {action.target}")

    def _diplomacy(self, agent_id: int, action: DiplomacyAction, world: GameState) -> ExecutionOutcome:
        proposal = _PROPOSALS.get(action.action, ProposalKind.TRADE_PACT)
        if action.target not in world.agents:
            self._logger.warning(
                "diplomacy_unknown_target",
                extra={"agent_id": agent_id, "target": action.target, "proposal": proposal.value},
            )
        world.diplomacy.ongoing_negotiations.append(
            Negotiation(
                initiator=agent_id,
                target=action.target,
                proposal=proposal,
                turns_remaining=NEGOTIATION_TURNS,
            )
        )
        return _succeeded(agent_id, f"Proposed {proposal.value} to agent {action.target}")

    def _defend(self, agent_id: int, action: DefendAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")

        moved = 0
        for unit in agent.military.units:
            if unit.position.distance_to(action.position) < DEFEND_RADIUS:
                unit.position = action.position
                moved += 1
        return _succeeded(agent_id, f"Defensive positions at {_format(action.position)} ({moved} units)")

    def _explore(self, agent_id: int, action: ExploreAction, world: GameState) -> ExecutionOutcome:
        agent = world.agents.get(agent_id)
        if agent is None:
            return _failed(agent_id, "Agent not found")
        if not agent.military.units:
            return _failed(agent_id, "No units available for exploration")
        return _succeeded(agent_id, f"Exploring towards {_format(action.target_position)}")
