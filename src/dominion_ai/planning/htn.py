"""Hierarchical task network decomposition."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

from dominion_ai.constants import HOSTILE_RELATION_THRESHOLD, HTN_MAX_DEPTH
from dominion_ai.models import (
    ActionIntent,
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
from dominion_ai.planning import targeting
from dominion_ai.world.state import Agent, BuildingType, GameState, Resource, TreatyKind, UnitType


class HtnTask(str, Enum):
    """Compound tasks with a registered method list."""

    CONQUEST_CAMPAIGN = "conquest_campaign"
    DIPLOMATIC_CAMPAIGN = "diplomatic_campaign"
    ECONOMIC_DEVELOPMENT = "economic_development"
    TECHNOLOGICAL_ADVANCEMENT = "technological_advancement"
    DEFENSIVE_PREPARATION = "defensive_preparation"


class PrimitiveAction(str, Enum):
    BUILD_ARMY = "build_army"
    EXPAND_TERRITORY = "expand_territory"
    RESEARCH_TECHNOLOGY = "research_technology"
    ESTABLISH_TRADE = "establish_trade"
    BUILD_INFRASTRUCTURE = "build_infrastructure"
    FORM_ALLIANCE = "form_alliance"
    DECLARE_WAR = "declare_war"
    DEFEND_TERRITORY = "defend_territory"


Subtask = Union[PrimitiveAction, HtnTask]


class Condition(Protocol):
    """Method precondition evaluated against the pre-decomposition snapshot."""

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        """Return whether the condition is met."""


@dataclass(frozen=True, slots=True)
class HasGold:
    amount: float

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return agent.economy.gold >= self.amount


@dataclass(frozen=True, slots=True)
class HasMilitaryStrength:
    strength: float

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return agent.military.total_strength >= self.strength


@dataclass(frozen=True, slots=True)
class HasCities:
    count: int

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return len(agent.cities) >= self.count


@dataclass(frozen=True, slots=True)
class HasTechnology:
    technology: str

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return self.technology in agent.technologies


@dataclass(frozen=True, slots=True)
class TurnGreaterThan:
    turn: int

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return world.turn > self.turn


@dataclass(frozen=True, slots=True)
class HasEnemies:
    """At war with, or deeply hostile to, at least one other agent."""

    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return any(
            relation.has_treaty(TreatyKind.WAR) or relation.relation_value < HOSTILE_RELATION_THRESHOLD
            for relation in world.diplomacy.relations_of(agent_id)
        )


@dataclass(frozen=True, slots=True)
class HasAllies:
    def holds(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return any(relation.has_treaty(TreatyKind.ALLIANCE) for relation in world.diplomacy.relations_of(agent_id))


@dataclass(frozen=True, slots=True)
class Method:
    name: str
    preconditions: tuple[Condition, ...]
    subtasks: tuple[Subtask, ...]

    def applicable(self, agent_id: int, agent: Agent, world: GameState) -> bool:
        return all(condition.holds(agent_id, agent, world) for condition in self.preconditions)


DEFAULT_NETWORKS: dict[HtnTask, tuple[Method, ...]] = {
    HtnTask.CONQUEST_CAMPAIGN: (
        Method(
            name="aggressive_conquest",
            preconditions=(HasMilitaryStrength(50.0), HasGold(100.0)),
            subtasks=(PrimitiveAction.BUILD_ARMY, PrimitiveAction.RESEARCH_TECHNOLOGY, PrimitiveAction.DECLARE_WAR),
        ),
        Method(
            name="preparation_phase",
            preconditions=(HasCities(1),),
            subtasks=(
                PrimitiveAction.BUILD_ARMY,
                PrimitiveAction.BUILD_INFRASTRUCTURE,
                HtnTask.ECONOMIC_DEVELOPMENT,
            ),
        ),
    ),
    HtnTask.DIPLOMATIC_CAMPAIGN: (
        Method(
            name="alliance_building",
            preconditions=(TurnGreaterThan(10),),
            subtasks=(PrimitiveAction.ESTABLISH_TRADE, PrimitiveAction.FORM_ALLIANCE),
        ),
    ),
    HtnTask.ECONOMIC_DEVELOPMENT: (
        Method(
            name="infrastructure_focus",
            preconditions=(HasCities(1),),
            subtasks=(
                PrimitiveAction.BUILD_INFRASTRUCTURE,
                PrimitiveAction.ESTABLISH_TRADE,
                PrimitiveAction.EXPAND_TERRITORY,
            ),
        ),
    ),
    HtnTask.TECHNOLOGICAL_ADVANCEMENT: (
        Method(
            name="research_focus",
            preconditions=(HasGold(50.0),),
            subtasks=(PrimitiveAction.RESEARCH_TECHNOLOGY, PrimitiveAction.BUILD_INFRASTRUCTURE),
        ),
    ),
    HtnTask.DEFENSIVE_PREPARATION: (
        Method(
            name="defensive_buildup",
            preconditions=(HasEnemies(),),
            subtasks=(PrimitiveAction.BUILD_ARMY, PrimitiveAction.DEFEND_TERRITORY, PrimitiveAction.FORM_ALLIANCE),
        ),
    ),
}


class HtnPlanner:
    """First-match-wins decomposition of compound tasks into action intents."""

    def __init__(
        self,
        networks: dict[HtnTask, tuple[Method, ...]] | None = None,
        *,
        max_depth: int = HTN_MAX_DEPTH,
        logger: logging.Logger | None = None,
    ) -> None:
        self._networks = networks if networks is not None else DEFAULT_NETWORKS
        self._max_depth = max_depth
        self._logger = logger or logging.getLogger("dominion_ai.htn")

    def select_method(self, agent_id: int, task: HtnTask, world: GameState) -> Method | None:
        """Return the first declared method whose preconditions hold, if any."""
        agent = world.agents.get(agent_id)
        if agent is None:
            return None
        for method in self._networks.get(task, ()):
            if method.applicable(agent_id, agent, world):
                return method
        return None

    def decompose_task(self, agent_id: int, task: HtnTask, world: GameState) -> list[ActionIntent] | None:
        """Return intents for ``task``, or ``None`` when no method applies or nothing resolves."""
        return self._decompose(agent_id, task, world, depth=0, active=())

    def _decompose(
        self,
        agent_id: int,
        task: HtnTask,
        world: GameState,
        *,
        depth: int,
        active: tuple[HtnTask, ...],
    ) -> list[ActionIntent] | None:
        method = self.select_method(agent_id, task, world)
        if method is None:
            return None

        active = (*active, task)
        actions: list[ActionIntent] = []
        for subtask in method.subtasks:
            if isinstance(subtask, PrimitiveAction):
                action = resolve_primitive(subtask, agent_id, world)
                if action is not None:
                    actions.append(action)
                continue

            if subtask in active or depth + 1 >= self._max_depth:
                self._logger.warning(
                    "htn_recursion_skipped",
                    extra={"agent_id": agent_id, "task": subtask.value, "depth": depth + 1, "method": method.name},
                )
                continue
            nested = self._decompose(agent_id, subtask, world, depth=depth + 1, active=active)
            if nested:
                actions.extend(nested)

        if not actions:
            return None
        return actions


def resolve_primitive(primitive: PrimitiveAction, agent_id: int, world: GameState) -> ActionIntent | None:
    """Resolve a primitive subtask to a concrete intent, or ``None`` when it has no target."""
    agent = world.agents.get(agent_id)
    if agent is None:
        return None
    capital = targeting.capital_or_default(agent)

    if primitive is PrimitiveAction.BUILD_ARMY:
        return BuildUnitAction(unit_type=UnitType.INFANTRY, position=capital, priority=0.8)
    if primitive is PrimitiveAction.EXPAND_TERRITORY:
        return ExpandAction(target_position=targeting.expansion_site_or_adjacent(agent, world), priority=0.7)
    if primitive is PrimitiveAction.RESEARCH_TECHNOLOGY:
        technology = targeting.next_technology(agent)
        if technology is None:
            return None
        return ResearchAction(technology=technology, priority=0.6)
    if primitive is PrimitiveAction.ESTABLISH_TRADE:
        partner = targeting.first_other_agent(agent_id, world)
        if partner is None:
            return None
        return TradeAction(partner=partner.id, resource=Resource.GOLD, priority=0.5)
    if primitive is PrimitiveAction.BUILD_INFRASTRUCTURE:
        return BuildBuildingAction(building_type=BuildingType.WORKSHOP, position=capital, priority=0.6)
    if primitive is PrimitiveAction.FORM_ALLIANCE:
        ally = targeting.alliance_candidate(agent_id, world)
        if ally is None:
            return None
        return DiplomacyAction(target=ally, action=DiplomaticAction.PROPOSE_ALLIANCE, priority=0.7)
    if primitive is PrimitiveAction.DECLARE_WAR:
        target = targeting.war_target(agent_id, agent, world)
        if target is None or target.capital is None:
            return None
        return AttackAction(target=target.id, target_position=target.capital, priority=0.9)
    return DefendAction(position=capital, priority=1.0)
