"""World snapshot types shared by planning and execution."""

from .state import (
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
    Negotiation,
    Personality,
    Position,
    ProposalKind,
    Resource,
    TerrainType,
    Territory,
    TradeRoute,
    Treaty,
    TreatyKind,
    UnitType,
    WorldMap,
)

__all__ = [
    "Agent",
    "Building",
    "BuildingType",
    "City",
    "DiplomaticRelation",
    "DiplomaticState",
    "Economy",
    "GameState",
    "MapTile",
    "Military",
    "MilitaryUnit",
    "Negotiation",
    "Personality",
    "Position",
    "ProposalKind",
    "Resource",
    "TerrainType",
    "Territory",
    "TradeRoute",
    "Treaty",
    "TreatyKind",
    "UnitType",
    "WorldMap",
]
