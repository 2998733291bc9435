"""World snapshot consumed by the planners and mutated by the executor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class Position:
    """Integer map coordinate."""

    x: int
    y: int

    def distance_to(self, other: Position) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def offset(self, dx: int, dy: int) -> Position:
        return Position(self.x + dx, self.y + dy)

    def neighbors(self) -> list[Position]:
        """Return the north, south, east and west neighbours."""
        return [self.offset(0, -1), self.offset(0, 1), self.offset(1, 0), self.offset(-1, 0)]


class TerrainType(str, Enum):
    PLAINS = "plains"
    HILLS = "hills"
    MOUNTAINS = "mountains"
    FOREST = "forest"
    DESERT = "desert"
    COAST = "coast"
    OCEAN = "ocean"


class UnitType(str, Enum):
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    ARCHER = "archer"
    SIEGE = "siege"
    NAVAL = "naval"


class BuildingType(str, Enum):
    GRANARY = "granary"
    BARRACKS = "barracks"
    WORKSHOP = "workshop"
    LIBRARY = "library"
    WALLS = "walls"
    MARKET = "market"
    TEMPLE = "temple"


class Resource(str, Enum):
    GOLD = "gold"
    FOOD = "food"
    PRODUCTION = "production"
    SCIENCE = "science"


@dataclass(slots=True)
class Personality:
    """Static trait weights that steer every planner."""

    land_hunger: float = 0.5
    industry_focus: float = 0.5
    tech_focus: float = 0.5
    interventionism: float = 0.5
    risk_tolerance: float = 0.5
    honor_treaties: float = 0.5
    militarism: float = 0.5
    isolationism: float = 0.5
    exploration_drive: float = 0.5


@dataclass(slots=True)
class TradeRoute:
    origin: Position
    destination: Position
    value: float
    security: float


@dataclass(slots=True)
class Economy:
    gold: float = 100.0
    income: float = 10.0
    expenses: float = 5.0
    trade_routes: list[TradeRoute] = field(default_factory=list)


@dataclass(slots=True)
class MilitaryUnit:
    id: int
    owner: int
    unit_type: UnitType
    position: Position
    strength: float


@dataclass(slots=True)
class Military:
    units: list[MilitaryUnit] = field(default_factory=list)
    total_strength: float = 0.0


@dataclass(slots=True)
class Building:
    building_type: BuildingType
    level: int = 1


@dataclass(slots=True)
class City:
    name: str
    position: Position
    buildings: list[Building] = field(default_factory=list)

    def has_building(self, building_type: BuildingType) -> bool:
        return any(building.building_type == building_type for building in self.buildings)


@dataclass(slots=True)
class Territory:
    position: Position
    owner: int
    control_strength: float
    terrain: TerrainType = TerrainType.PLAINS


@dataclass(slots=True)
class Agent:
    """One civilization and everything the planners may read about it."""

    id: int
    name: str
    personality: Personality = field(default_factory=Personality)
    economy: Economy = field(default_factory=Economy)
    military: Military = field(default_factory=Military)
    technologies: set[str] = field(default_factory=set)
    capital: Position | None = None
    cities: list[City] = field(default_factory=list)
    territories: list[Territory] = field(default_factory=list)


@dataclass(slots=True)
class MapTile:
    terrain: TerrainType = TerrainType.PLAINS
    owner: int | None = None


@dataclass(slots=True)
class WorldMap:
    """Sparse tile grid; in-bounds positions without an entry are unowned plains."""

    width: int = 100
    height: int = 50
    tiles: dict[Position, MapTile] = field(default_factory=dict)

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def get_tile(self, position: Position) -> MapTile | None:
        if not self.in_bounds(position):
            return None
        return self.tiles.get(position) or MapTile()

    def tile_mut(self, position: Position) -> MapTile | None:
        """Return the stored tile for ``position``, materializing it if needed."""
        if not self.in_bounds(position):
            return None
        return self.tiles.setdefault(position, MapTile())

    def neighbors(self, position: Position) -> list[Position]:
        return [candidate for candidate in position.neighbors() if self.in_bounds(candidate)]


class TreatyKind(str, Enum):
    NON_AGGRESSION = "non_aggression"
    ALLIANCE = "alliance"
    TRADE_PACT = "trade_pact"
    WAR = "war"


@dataclass(slots=True)
class Treaty:
    kind: TreatyKind
    turns_remaining: int | None = None
    started_turn: int | None = None


class ProposalKind(str, Enum):
    TRADE_PACT = "trade_pact"
    NON_AGGRESSION_PACT = "non_aggression_pact"
    ALLIANCE = "alliance"
    PEACE_TREATY = "peace_treaty"


@dataclass(slots=True)
class DiplomaticRelation:
    agent_a: int
    agent_b: int
    relation_value: int = 0
    treaties: list[Treaty] = field(default_factory=list)
    trade_agreement: bool = False

    def involves(self, agent_id: int) -> bool:
        return agent_id in (self.agent_a, self.agent_b)

    def other(self, agent_id: int) -> int:
        return self.agent_b if agent_id == self.agent_a else self.agent_a

    def has_treaty(self, kind: TreatyKind) -> bool:
        return any(treaty.kind == kind for treaty in self.treaties)


@dataclass(slots=True)
class Negotiation:
    initiator: int
    target: int
    proposal: ProposalKind
    turns_remaining: int


@dataclass(slots=True)
class DiplomaticState:
    relations: dict[tuple[int, int], DiplomaticRelation] = field(default_factory=dict)
    ongoing_negotiations: list[Negotiation] = field(default_factory=list)

    def relation_between(self, agent_a: int, agent_b: int) -> DiplomaticRelation | None:
        """Look up a relation regardless of the order it was stored in."""
        return self.relations.get((agent_a, agent_b)) or self.relations.get((agent_b, agent_a))

    def relations_of(self, agent_id: int) -> list[DiplomaticRelation]:
        return [relation for relation in self.relations.values() if relation.involves(agent_id)]

    def add_relation(self, relation: DiplomaticRelation) -> None:
        self.relations[(relation.agent_a, relation.agent_b)] = relation


@dataclass(slots=True)
class GameState:
    """Complete world snapshot for one turn."""

    turn: int = 0
    agents: dict[int, Agent] = field(default_factory=dict)
    world_map: WorldMap = field(default_factory=WorldMap)
    diplomacy: DiplomaticState = field(default_factory=DiplomaticState)

    def other_agents(self, agent_id: int) -> list[Agent]:
        """Return every agent except ``agent_id``, ordered by id."""
        return [self.agents[other_id] for other_id in sorted(self.agents) if other_id != agent_id]
