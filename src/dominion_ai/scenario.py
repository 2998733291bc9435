"""Load world snapshots from JSON scenario files."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator

from dominion_ai.world.state import (
    Agent,
    Building,
    BuildingType,
    City,
    DiplomaticRelation,
    DiplomaticState,
    Economy,
    GameState,
    MapTile,
    Military,
    MilitaryUnit,
    Personality,
    Position,
    TerrainType,
    Territory,
    Treaty,
    TreatyKind,
    UnitType,
    WorldMap,
)


class ScenarioError(RuntimeError):
    """Raised when a scenario file cannot be read or does not validate."""


class PositionModel(BaseModel):
    x: int
    y: int

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class PersonalityModel(BaseModel):
    land_hunger: float = Field(default=0.5, ge=0.0, le=1.0)
    industry_focus: float = Field(default=0.5, ge=0.0, le=1.0)
    tech_focus: float = Field(default=0.5, ge=0.0, le=1.0)
    interventionism: float = Field(default=0.5, ge=0.0, le=1.0)
    risk_tolerance: float = Field(default=0.5, ge=0.0, le=1.0)
    honor_treaties: float = Field(default=0.5, ge=0.0, le=1.0)
    militarism: float = Field(default=0.5, ge=0.0, le=1.0)
    isolationism: float = Field(default=0.5, ge=0.0, le=1.0)
    exploration_drive: float = Field(default=0.5, ge=0.0, le=1.0)


class EconomyModel(BaseModel):
    gold: float = 100.0
    income: float = 10.0
    expenses: float = 5.0


class UnitModel(BaseModel):
    id: int
    unit_type: UnitType = UnitType.INFANTRY
    position: PositionModel
    strength: float = 10.0


class CityModel(BaseModel):
    name: str
    position: PositionModel
    buildings: list[BuildingType] = Field(default_factory=list)


class AgentModel(BaseModel):
    id: int
    name: str
    personality: PersonalityModel = Field(default_factory=PersonalityModel)
    economy: EconomyModel = Field(default_factory=EconomyModel)
    units: list[UnitModel] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    capital: PositionModel | None = None
    cities: list[CityModel] = Field(default_factory=list)
    territories: list[PositionModel] = Field(default_factory=list)


class TileModel(BaseModel):
    position: PositionModel
    terrain: TerrainType = TerrainType.PLAINS
    owner: int | None = None


class MapModel(BaseModel):
    width: int = Field(default=100, gt=0)
    height: int = Field(default=50, gt=0)
    tiles: list[TileModel] = Field(default_factory=list)


class TreatyModel(BaseModel):
    kind: TreatyKind
    turns_remaining: int | None = None
    started_turn: int | None = None


class RelationModel(BaseModel):
    agent_a: int
    agent_b: int
    relation_value: int = Field(default=0, ge=-100, le=100)
    treaties: list[TreatyModel] = Field(default_factory=list)
    trade_agreement: bool = False


class ScenarioModel(BaseModel):
    """Top-level scenario document."""

    turn: int = Field(default=0, ge=0)
    map: MapModel = Field(default_factory=MapModel)
    agents: list[AgentModel]
    relations: list[RelationModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> ScenarioModel:
        ids = [agent.id for agent in self.agents]
        if len(ids) != len(set(ids)):
            raise ValueError("agent ids must be unique")
        known = set(ids)
        for relation in self.relations:
            if relation.agent_a not in known or relation.agent_b not in known:
                raise ValueError(f"relation references unknown agent: {relation.agent_a}-{relation.agent_b}")
        return self

    def to_game_state(self) -> GameState:
        world_map = WorldMap(width=self.map.width, height=self.map.height)
        for tile in self.map.tiles:
            world_map.tiles[tile.position.to_position()] = MapTile(terrain=tile.terrain, owner=tile.owner)

        agents: dict[int, Agent] = {}
        for entry in self.agents:
            agent = _build_agent(entry)
            for territory in agent.territories:
                stored = world_map.tile_mut(territory.position)
                if stored is not None:
                    stored.owner = agent.id
                    territory.terrain = stored.terrain
            agents[agent.id] = agent

        diplomacy = DiplomaticState()
        for relation in self.relations:
            diplomacy.add_relation(
                DiplomaticRelation(
                    agent_a=relation.agent_a,
                    agent_b=relation.agent_b,
                    relation_value=relation.relation_value,
                    treaties=[
                        Treaty(kind=treaty.kind, turns_remaining=treaty.turns_remaining, started_turn=treaty.started_turn)
                        for treaty in relation.treaties
                    ],
                    trade_agreement=relation.trade_agreement,
                )
            )

        return GameState(turn=self.turn, agents=agents, world_map=world_map, diplomacy=diplomacy)


def _build_agent(entry: AgentModel) -> Agent:
    units = [
        MilitaryUnit(
            id=unit.id,
            owner=entry.id,
            unit_type=unit.unit_type,
            position=unit.position.to_position(),
            strength=unit.strength,
        )
        for unit in entry.units
    ]
    return Agent(
        id=entry.id,
        name=entry.name,
        personality=Personality(**entry.personality.model_dump()),
        economy=Economy(gold=entry.economy.gold, income=entry.economy.income, expenses=entry.economy.expenses),
        military=Military(units=units, total_strength=sum(unit.strength for unit in units)),
        technologies=set(entry.technologies),
        capital=entry.capital.to_position() if entry.capital else None,
        cities=[
            City(
                name=city.name,
                position=city.position.to_position(),
                buildings=[Building(building_type=kind) for kind in city.buildings],
            )
            for city in entry.cities
        ],
        territories=[
            Territory(position=position.to_position(), owner=entry.id, control_strength=1.0)
            for position in entry.territories
        ],
    )


def parse_scenario(text: str) -> GameState:
    try:
        model = ScenarioModel.model_validate_json(text)
    except ValidationError as exc:
        raise ScenarioError(f"Invalid scenario: {exc}") from exc
    return model.to_game_state()


def load_scenario(path: str | Path) -> GameState:
    """Read and validate a scenario file into a fresh world snapshot."""
    target = Path(path).expanduser()
    if not target.exists():
        raise ScenarioError(f"Scenario not found: {target}")
    try:
        text = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise ScenarioError(f"Could not read scenario {target}: {exc}") from exc
    return parse_scenario(text)
