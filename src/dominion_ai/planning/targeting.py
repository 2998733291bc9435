"""Target resolution rules shared by the utility, GOAP and HTN planners."""

from __future__ import annotations

from collections.abc import Collection

from dominion_ai.constants import (
    ALLIANCE_RELATION_THRESHOLD,
    DEFAULT_CAPITAL,
    EXPLORE_OFFSETS,
    MAX_TRADE_DISTANCE,
    TECHNOLOGY_TREE,
    WAR_STRENGTH_RATIO,
)
from dominion_ai.world.state import Agent, GameState, Position, TerrainType


def capital_or_default(agent: Agent) -> Position:
    return agent.capital if agent.capital is not None else Position(*DEFAULT_CAPITAL)


def free_neighbours(agent: Agent, world: GameState) -> list[Position]:
    """In-bounds tiles next to the capital that nobody owns."""
    capital = capital_or_default(agent)
    free: list[Position] = []
    for position in world.world_map.neighbors(capital):
        tile = world.world_map.get_tile(position)
        if tile is not None and tile.owner is None:
            free.append(position)
    return free


def expansion_site(agent: Agent, world: GameState, exclude: Collection[Position] = ()) -> Position | None:
    """First unowned, non-ocean tile next to the capital that is not in ``exclude``."""
    for position in free_neighbours(agent, world):
        if position in exclude:
            continue
        tile = world.world_map.get_tile(position)
        if tile is not None and tile.terrain != TerrainType.OCEAN:
            return position
    return None


def expansion_site_or_adjacent(agent: Agent, world: GameState) -> Position:
    """Expansion site for plan steps, defaulting to the tile east of the capital."""
    return expansion_site(agent, world) or capital_or_default(agent).offset(1, 0)


def next_technology(agent: Agent, exclude: Collection[str] = ()) -> str | None:
    for technology in TECHNOLOGY_TREE:
        if technology not in agent.technologies and technology not in exclude:
            return technology
    return None


def first_other_agent(agent_id: int, world: GameState) -> Agent | None:
    others = world.other_agents(agent_id)
    return others[0] if others else None


def nearest_trade_partner(agent_id: int, agent: Agent, world: GameState) -> Agent | None:
    """Closest other agent whose capital lies within trading distance."""
    capital = capital_or_default(agent)
    best: Agent | None = None
    best_distance = float("inf")
    for other in world.other_agents(agent_id):
        if other.capital is None:
            continue
        distance = capital.distance_to(other.capital)
        if distance < best_distance and distance < MAX_TRADE_DISTANCE:
            best = other
            best_distance = distance
    return best


def alliance_candidate(agent_id: int, world: GameState) -> int | None:
    """Other agent with the best relation above the alliance threshold."""
    best: int | None = None
    best_value = ALLIANCE_RELATION_THRESHOLD
    for relation in world.diplomacy.relations_of(agent_id):
        other_id = relation.other(agent_id)
        if other_id == agent_id:
            continue
        if relation.relation_value > best_value:
            best = other_id
            best_value = relation.relation_value
    return best


def war_target(agent_id: int, agent: Agent, world: GameState) -> Agent | None:
    """Weakest other agent clearly outmatched by ``agent``."""
    ceiling = agent.military.total_strength * WAR_STRENGTH_RATIO
    weakest: Agent | None = None
    for other in world.other_agents(agent_id):
        strength = other.military.total_strength
        if strength >= ceiling:
            continue
        if weakest is None or strength < weakest.military.total_strength:
            weakest = other
    return weakest


def explore_target(agent: Agent, turn: int) -> Position:
    dx, dy = EXPLORE_OFFSETS[turn % len(EXPLORE_OFFSETS)]
    return capital_or_default(agent).offset(dx, dy)
