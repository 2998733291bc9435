"""Goal-oriented action planning over fixed-point fact vectors."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from dominion_ai.constants import GOLD_PER_COST_UNIT, SEARCH_EXPANSION_LIMIT
from dominion_ai.models import (
    ActionIntent,
    BuildBuildingAction,
    BuildUnitAction,
    DiplomacyAction,
    DiplomaticAction,
    ExpandAction,
    ExploreAction,
    ResearchAction,
    TradeAction,
)
from dominion_ai.planning import targeting
from dominion_ai.planning.facts import FactVector
from dominion_ai.world.state import Agent, BuildingType, GameState, Position, Resource, UnitType


class StrategicGoal(str, Enum):
    """Long-horizon objectives a personality can commit to."""

    EXPAND_TERRITORY = "expand_territory"
    ADVANCE_TECHNOLOGY = "advance_technology"
    DEVELOP_ECONOMY = "develop_economy"
    BUILD_MILITARY = "build_military"
    ESTABLISH_DIPLOMACY = "establish_diplomacy"
    DEFEND_TERRITORY = "defend_territory"
    EXPLORE_TERRITORY = "explore_territory"


class TemplateTag(str, Enum):
    """Selects which intent a template turns into once a plan is found."""

    EXPAND = "expand"
    RESEARCH = "research"
    BUILD_MILITARY = "build_military"
    TRADE = "trade"
    BUILD_ECONOMIC = "build_economic"
    EXPLORE = "explore"
    DIPLOMACY = "diplomacy"
    FORTIFY = "fortify"


@dataclass(frozen=True, slots=True)
class ActionTemplate:
    name: str
    cost: float
    preconditions: tuple[tuple[str, float], ...]
    effects: tuple[tuple[str, float], ...]
    tag: TemplateTag

    @property
    def priority(self) -> float:
        return 1.0 - self.cost / 10.0

    def applicable(self, facts: FactVector) -> bool:
        return all(facts.meets(name, minimum) for name, minimum in self.preconditions)

    def apply(self, facts: FactVector) -> FactVector:
        """Apply every effect, then charge the planning gold penalty."""
        result = facts
        for name, delta in self.effects:
            result = result.with_delta(name, delta)
        return result.with_delta("gold", -self.cost * GOLD_PER_COST_UNIT)


DEFAULT_TEMPLATES: tuple[ActionTemplate, ...] = (
    ActionTemplate(
        name="expand_territory",
        cost=2.0,
        preconditions=(("has_capital", 1.0), ("gold", 10.0)),
        effects=(("territory_count", 1.0),),
        tag=TemplateTag.EXPAND,
    ),
    ActionTemplate(
        name="research_technology",
        cost=3.0,
        preconditions=(("gold", 50.0),),
        effects=(("technology_level", 1.0),),
        tag=TemplateTag.RESEARCH,
    ),
    ActionTemplate(
        name="build_military_unit",
        cost=2.5,
        preconditions=(("gold", 30.0), ("city_count", 1.0)),
        effects=(("military_strength", 10.0),),
        tag=TemplateTag.BUILD_MILITARY,
    ),
    ActionTemplate(
        name="establish_trade",
        cost=1.5,
        preconditions=(("city_count", 1.0),),
        effects=(("trade_routes", 1.0), ("income", 5.0)),
        tag=TemplateTag.TRADE,
    ),
    ActionTemplate(
        name="build_economic_building",
        cost=2.0,
        preconditions=(("gold", 25.0), ("city_count", 1.0)),
        effects=(("income", 3.0),),
        tag=TemplateTag.BUILD_ECONOMIC,
    ),
    ActionTemplate(
        name="explore_territory",
        cost=1.0,
        preconditions=(("has_capital", 1.0),),
        effects=(("explored_tiles", 5.0),),
        tag=TemplateTag.EXPLORE,
    ),
    ActionTemplate(
        name="propose_trade_pact",
        cost=1.0,
        preconditions=(("has_capital", 1.0),),
        effects=(("diplomatic_relations", 1.0),),
        tag=TemplateTag.DIPLOMACY,
    ),
    ActionTemplate(
        name="build_fortifications",
        cost=2.0,
        preconditions=(("gold", 25.0), ("city_count", 1.0)),
        effects=(("fortifications", 1.0),),
        tag=TemplateTag.FORTIFY,
    ),
)


def extract_facts(agent: Agent) -> FactVector:
    """Snapshot the planning-relevant facts of one agent."""
    return FactVector.from_values(
        {
            "territory_count": len(agent.territories),
            "military_strength": agent.military.total_strength,
            "gold": agent.economy.gold,
            "income": agent.economy.income,
            "technology_level": len(agent.technologies),
            "city_count": len(agent.cities),
            "has_capital": 1.0 if agent.capital is not None else 0.0,
            "trade_routes": len(agent.economy.trade_routes),
        }
    )


def goal_facts(goal: StrategicGoal, current: FactVector) -> FactVector:
    """Target values for the facts ``goal`` names, derived from ``current``.

    Only the transformed facts appear in the result. Gold and the other facts
    a plan consumes along the way are never part of a goal.
    """
    if goal is StrategicGoal.EXPAND_TERRITORY:
        targets = {"territory_count": current.get("territory_count") + 3.0}
    elif goal is StrategicGoal.ADVANCE_TECHNOLOGY:
        targets = {"technology_level": current.get("technology_level") + 2.0}
    elif goal is StrategicGoal.DEVELOP_ECONOMY:
        targets = {
            "income": current.get("income") * 1.5,
            "trade_routes": current.get("trade_routes") + 2.0,
        }
    elif goal is StrategicGoal.BUILD_MILITARY:
        targets = {"military_strength": current.get("military_strength") * 1.5}
    elif goal is StrategicGoal.ESTABLISH_DIPLOMACY:
        targets = {"diplomatic_relations": 3.0}
    elif goal is StrategicGoal.DEFEND_TERRITORY:
        targets = {
            "military_strength": current.get("military_strength") * 1.3,
            "fortifications": 2.0,
        }
    else:
        targets = {"explored_tiles": current.get("explored_tiles") + 10.0}
    return FactVector.from_values(targets)


@dataclass(slots=True)
class PlanTargets:
    """Tiles and technologies already taken by earlier steps of one plan."""

    positions: set[Position] = field(default_factory=set)
    technologies: set[str] = field(default_factory=set)


@dataclass(slots=True)
class SearchResult:
    """Outcome of one search: the template chain (``None`` when aborted or exhausted)."""

    steps: list[ActionTemplate] | None
    expansions: int
    aborted: bool = False
    visited: int = 0

    @property
    def found(self) -> bool:
        return self.steps is not None


class GoapPlanner:
    """Searches template chains that take an agent's facts to a goal vector.

    The frontier is processed first-in first-out, so the result is the first
    goal-satisfying vector in discovery order, which is not necessarily the
    cheapest chain.
    """

    def __init__(
        self,
        templates: tuple[ActionTemplate, ...] | None = None,
        *,
        expansion_limit: int = SEARCH_EXPANSION_LIMIT,
        deadline_ms: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._templates = templates if templates is not None else DEFAULT_TEMPLATES
        self._expansion_limit = expansion_limit
        self._deadline_ms = deadline_ms
        self._logger = logger or logging.getLogger("dominion_ai.goap")

    @property
    def templates(self) -> tuple[ActionTemplate, ...]:
        return self._templates

    def plan_for_goal(self, agent_id: int, goal: StrategicGoal, world: GameState) -> list[ActionIntent] | None:
        """Return intents reaching ``goal`` in order, or ``None`` when no plan was found."""
        agent = world.agents.get(agent_id)
        if agent is None:
            return None

        start = extract_facts(agent)
        result = self.search(start, goal_facts(goal, start))
        if result.steps is None:
            self._logger.debug(
                "goap_no_plan",
                extra={
                    "agent_id": agent_id,
                    "goal": goal.value,
                    "expansions": result.expansions,
                    "aborted": result.aborted,
                },
            )
            return None

        intents: list[ActionIntent] = []
        claimed = PlanTargets()
        for template in result.steps:
            intent = to_intent(template, agent_id, world, claimed)
            if intent is not None:
                intents.append(intent)
        self._logger.debug(
            "goap_plan_found",
            extra={
                "agent_id": agent_id,
                "goal": goal.value,
                "steps": [template.name for template in result.steps],
                "expansions": result.expansions,
            },
        )
        return intents

    def search(self, start: FactVector, goal: FactVector) -> SearchResult:
        """Breadth-ordered search from ``start`` until a vector satisfies ``goal``."""
        frontier: deque[FactVector] = deque([start])
        queued: set[FactVector] = {start}
        closed: set[FactVector] = set()
        best_cost: dict[FactVector, float] = {start: 0.0}
        came_from: dict[FactVector, tuple[FactVector, ActionTemplate]] = {}
        started = time.monotonic()
        expansions = 0

        while frontier:
            if expansions >= self._expansion_limit or self._past_deadline(started):
                return SearchResult(steps=None, expansions=expansions, aborted=True, visited=len(closed))

            current = frontier.popleft()
            queued.discard(current)
            expansions += 1

            if current.satisfies(goal):
                return SearchResult(
                    steps=self._reconstruct(came_from, current),
                    expansions=expansions,
                    visited=len(closed),
                )

            closed.add(current)
            for template in self._templates:
                if not template.applicable(current):
                    continue
                successor = template.apply(current)
                if successor in closed:
                    continue
                tentative = best_cost[current] + template.cost
                if tentative < best_cost.get(successor, float("inf")):
                    came_from[successor] = (current, template)
                    best_cost[successor] = tentative
                    if successor not in queued:
                        frontier.append(successor)
                        queued.add(successor)

        return SearchResult(steps=None, expansions=expansions, visited=len(closed))

    def _past_deadline(self, started: float) -> bool:
        if self._deadline_ms is None:
            return False
        return (time.monotonic() - started) * 1000.0 > self._deadline_ms

    @staticmethod
    def _reconstruct(
        came_from: dict[FactVector, tuple[FactVector, ActionTemplate]],
        final: FactVector,
    ) -> list[ActionTemplate]:
        steps: list[ActionTemplate] = []
        current = final
        while current in came_from:
            previous, template = came_from[current]
            steps.append(template)
            current = previous
        steps.reverse()
        return steps


def to_intent(
    template: ActionTemplate,
    agent_id: int,
    world: GameState,
    claimed: PlanTargets | None = None,
) -> ActionIntent | None:
    """Resolve a concrete target for one plan step; ``None`` drops the step.

    Targets recorded in ``claimed`` are skipped and the resolved one is added,
    so consecutive steps of one plan never aim at the same tile or technology.
    """
    if claimed is None:
        claimed = PlanTargets()
    agent = world.agents.get(agent_id)
    if agent is None:
        return None

    capital = targeting.capital_or_default(agent)
    priority = template.priority
    tag = template.tag

    if tag is TemplateTag.EXPAND:
        site = targeting.expansion_site(agent, world, claimed.positions)
        if site is None:
            site = capital.offset(1, 0)
            if site in claimed.positions:
                return None
        claimed.positions.add(site)
        return ExpandAction(target_position=site, priority=priority)
    if tag is TemplateTag.RESEARCH:
        technology = targeting.next_technology(agent, claimed.technologies)
        if technology is None:
            return None
        claimed.technologies.add(technology)
        return ResearchAction(technology=technology, priority=priority)
    if tag is TemplateTag.BUILD_MILITARY:
        return BuildUnitAction(unit_type=UnitType.INFANTRY, position=capital, priority=priority)
    if tag is TemplateTag.TRADE:
        partner = targeting.first_other_agent(agent_id, world)
        if partner is None:
            return None
        return TradeAction(partner=partner.id, resource=Resource.GOLD, priority=priority)
    if tag is TemplateTag.BUILD_ECONOMIC:
        return BuildBuildingAction(building_type=BuildingType.MARKET, position=capital, priority=priority)
    if tag is TemplateTag.FORTIFY:
        return BuildBuildingAction(building_type=BuildingType.WALLS, position=capital, priority=priority)
    if tag is TemplateTag.DIPLOMACY:
        partner = targeting.first_other_agent(agent_id, world)
        if partner is None:
            return None
        return DiplomacyAction(target=partner.id, action=DiplomaticAction.PROPOSE_TRADE_PACT, priority=priority)
    return ExploreAction(target_position=targeting.explore_target(agent, world.turn), priority=priority)
