"""Reactive single-step utility scoring."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from dominion_ai.constants import (
    ECONOMIC_PRESSURE_CAP,
    EXPANSION_LAND_DIVISOR,
    RESEARCH_GOLD_SCALE,
    THREAT_CAP,
    THREAT_RADIUS,
    TRADE_ROUTE_SATURATION,
    TRADE_SCORE_FACTOR,
    UTILITY_THRESHOLD,
)
from dominion_ai.models import (
    ActionIntent,
    BuildBuildingAction,
    BuildUnitAction,
    ExpandAction,
    ExploreAction,
    ResearchAction,
    TradeAction,
)
from dominion_ai.planning import targeting
from dominion_ai.world.state import Agent, BuildingType, GameState, Resource, UnitType


class UtilityStrategy(str, Enum):
    """Built-in single-step strategies, scored every turn for every agent."""

    EXPAND = "expand"
    RESEARCH = "research"
    MILITARY = "military"
    ECONOMY = "economy"
    TRADE = "trade"
    EXPLORE = "explore"


Scorer = Callable[[int, Agent, GameState], float]
Constructor = Callable[[int, Agent, GameState, float], "ActionIntent | None"]


def _score_expand(agent_id: int, agent: Agent, world: GameState) -> float:
    available = len(targeting.free_neighbours(agent, world))
    return agent.personality.land_hunger * min(available / EXPANSION_LAND_DIVISOR, 1.0)


def _score_research(agent_id: int, agent: Agent, world: GameState) -> float:
    return agent.personality.tech_focus * min(agent.economy.gold / RESEARCH_GOLD_SCALE, 1.0)


def _score_military(agent_id: int, agent: Agent, world: GameState) -> float:
    capital = targeting.capital_or_default(agent)
    nearby_threat = 0.0
    for other in world.other_agents(agent_id):
        if other.capital is None:
            continue
        distance = capital.distance_to(other.capital)
        if distance < THREAT_RADIUS:
            nearby_threat += other.military.total_strength / (distance + 1.0)
    threat = min(nearby_threat / (agent.military.total_strength + 1.0), THREAT_CAP)
    return agent.personality.militarism * (0.5 + threat * 0.5)


def _score_economy(agent_id: int, agent: Agent, world: GameState) -> float:
    economy = agent.economy
    if economy.income > 0:
        pressure = min(economy.expenses / economy.income, ECONOMIC_PRESSURE_CAP)
    else:
        pressure = ECONOMIC_PRESSURE_CAP
    return agent.personality.industry_focus * (0.3 + pressure * 0.7)


def _score_trade(agent_id: int, agent: Agent, world: GameState) -> float:
    if not world.other_agents(agent_id):
        return 0.0
    saturation = min(len(agent.economy.trade_routes) / TRADE_ROUTE_SATURATION, 1.0)
    return agent.personality.industry_focus * (1.0 - saturation) * TRADE_SCORE_FACTOR


def _score_explore(agent_id: int, agent: Agent, world: GameState) -> float:
    if world.turn < 20:
        stage = 1.5
    elif world.turn < 50:
        stage = 1.0
    else:
        stage = 0.5

    territory_count = len(agent.territories)
    if territory_count < 3:
        spread = 1.2
    elif territory_count < 6:
        spread = 1.0
    else:
        spread = 0.7
    return agent.personality.exploration_drive * stage * spread


def _construct_expand(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    target = targeting.expansion_site(agent, world)
    if target is None:
        return None
    return ExpandAction(target_position=target, priority=utility)


def _construct_research(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    technology = targeting.next_technology(agent)
    if technology is None:
        return None
    return ResearchAction(technology=technology, priority=utility)


def _construct_military(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    unit_type = UnitType.INFANTRY if len(agent.military.units) < 2 else UnitType.ARCHER
    return BuildUnitAction(unit_type=unit_type, position=targeting.capital_or_default(agent), priority=utility)


def _construct_economy(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    has_market = any(city.has_building(BuildingType.MARKET) for city in agent.cities)
    building_type = BuildingType.WORKSHOP if has_market else BuildingType.MARKET
    return BuildBuildingAction(
        building_type=building_type,
        position=targeting.capital_or_default(agent),
        priority=utility,
    )


def _construct_trade(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    partner = targeting.nearest_trade_partner(agent_id, agent, world)
    if partner is None:
        return None
    return TradeAction(partner=partner.id, resource=Resource.GOLD, priority=utility)


def _construct_explore(agent_id: int, agent: Agent, world: GameState, utility: float) -> ActionIntent | None:
    return ExploreAction(target_position=targeting.explore_target(agent, world.turn), priority=utility)


_SCORERS: dict[UtilityStrategy, Scorer] = {
    UtilityStrategy.EXPAND: _score_expand,
    UtilityStrategy.RESEARCH: _score_research,
    UtilityStrategy.MILITARY: _score_military,
    UtilityStrategy.ECONOMY: _score_economy,
    UtilityStrategy.TRADE: _score_trade,
    UtilityStrategy.EXPLORE: _score_explore,
}

_CONSTRUCTORS: dict[UtilityStrategy, Constructor] = {
    UtilityStrategy.EXPAND: _construct_expand,
    UtilityStrategy.RESEARCH: _construct_research,
    UtilityStrategy.MILITARY: _construct_military,
    UtilityStrategy.ECONOMY: _construct_economy,
    UtilityStrategy.TRADE: _construct_trade,
    UtilityStrategy.EXPLORE: _construct_explore,
}


def score(strategy: UtilityStrategy, agent_id: int, agent: Agent, world: GameState) -> float:
    """Return the utility of ``strategy`` for one agent."""
    return _SCORERS[strategy](agent_id, agent, world)


def construct(
    strategy: UtilityStrategy,
    agent_id: int,
    agent: Agent,
    world: GameState,
    utility: float,
) -> ActionIntent | None:
    """Build the concrete intent for ``strategy``, or ``None`` when it has no valid target."""
    return _CONSTRUCTORS[strategy](agent_id, agent, world, utility)


class UtilityScorer:
    """Scores every strategy and keeps the ones that clear the consideration threshold."""

    def __init__(
        self,
        strategies: tuple[UtilityStrategy, ...] | None = None,
        *,
        threshold: float = UTILITY_THRESHOLD,
        logger: logging.Logger | None = None,
    ) -> None:
        self._strategies = strategies or tuple(UtilityStrategy)
        self._threshold = threshold
        self._logger = logger or logging.getLogger("dominion_ai.utility")

    @property
    def strategies(self) -> tuple[UtilityStrategy, ...]:
        return self._strategies

    def evaluate(self, agent_id: int, agent: Agent, world: GameState) -> list[ActionIntent]:
        """Return intents from every strategy above threshold, highest priority first."""
        actions: list[ActionIntent] = []
        for strategy in self._strategies:
            utility = score(strategy, agent_id, agent, world)
            if utility <= self._threshold:
                continue
            action = construct(strategy, agent_id, agent, world, utility)
            if action is None:
                self._logger.debug(
                    "utility_strategy_declined",
                    extra={"agent_id": agent_id, "strategy": strategy.value, "utility": utility},
                )
                continue
            actions.append(action)

        actions.sort(key=lambda action: action.priority, reverse=True)
        return actions
