"""Action intents emitted by the planners and outcomes reported by execution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from dominion_ai.world.state import BuildingType, Position, Resource, UnitType


class ActionKind(str, Enum):
    """Discriminator shared by every action intent variant."""

    EXPAND = "expand"
    RESEARCH = "research"
    BUILD_UNIT = "build_unit"
    BUILD_BUILDING = "build_building"
    TRADE = "trade"
    ATTACK = "attack"
    DIPLOMACY = "diplomacy"
    DEFEND = "defend"
    EXPLORE = "explore"


class DiplomaticAction(str, Enum):
    PROPOSE_ALLIANCE = "propose_alliance"
    PROPOSE_NON_AGGRESSION = "propose_non_aggression"
    PROPOSE_TRADE_PACT = "propose_trade_pact"
    DECLARE_WAR = "declare_war"
    MAKE_PEACE = "make_peace"
    BREAK_TREATY = "break_treaty"


@dataclass(frozen=True, slots=True)
class ExpandAction:
    kind: ClassVar[ActionKind] = ActionKind.EXPAND

    target_position: Position
    priority: float


@dataclass(frozen=True, slots=True)
class ResearchAction:
    kind: ClassVar[ActionKind] = ActionKind.RESEARCH

    technology: str
    priority: float


@dataclass(frozen=True, slots=True)
class BuildUnitAction:
    kind: ClassVar[ActionKind] = ActionKind.BUILD_UNIT

    unit_type: UnitType
    position: Position
    priority: float


@dataclass(frozen=True, slots=True)
class BuildBuildingAction:
    kind: ClassVar[ActionKind] = ActionKind.BUILD_BUILDING

    building_type: BuildingType
    position: Position
    priority: float


@dataclass(frozen=True, slots=True)
class TradeAction:
    kind: ClassVar[ActionKind] = ActionKind.TRADE

    partner: int
    resource: Resource
    priority: float


@dataclass(frozen=True, slots=True)
class AttackAction:
    kind: ClassVar[ActionKind] = ActionKind.ATTACK

    target: int
    target_position: Position
    priority: float


@dataclass(frozen=True, slots=True)
class DiplomacyAction:
    kind: ClassVar[ActionKind] = ActionKind.DIPLOMACY

    target: int
    action: DiplomaticAction
    priority: float


@dataclass(frozen=True, slots=True)
class DefendAction:
    kind: ClassVar[ActionKind] = ActionKind.DEFEND

    position: Position
    priority: float


@dataclass(frozen=True, slots=True)
class ExploreAction:
    kind: ClassVar[ActionKind] = ActionKind.EXPLORE

    target_position: Position
    priority: float


ActionIntent = Union[
    ExpandAction,
    ResearchAction,
    BuildUnitAction,
    BuildBuildingAction,
    TradeAction,
    AttackAction,
    DiplomacyAction,
    DefendAction,
    ExploreAction,
]


def describe_action(action: ActionIntent) -> str:
    """Short human-readable summary used by logs and the CLI."""
    if isinstance(action, ExpandAction):
        return f"expand to ({action.target_position.x}, {action.target_position.y})"
    if isinstance(action, ResearchAction):
        return f"research {action.technology}"
    if isinstance(action, BuildUnitAction):
        return f"build {action.unit_type.value} at ({action.position.x}, {action.position.y})"
    if isinstance(action, BuildBuildingAction):
        return f"build {action.building_type.value}"
    if isinstance(action, TradeAction):
        return f"trade {action.resource.value} with agent {action.partner}"
    if isinstance(action, AttackAction):
        return f"attack agent {action.target}"
    if isinstance(action, DiplomacyAction):
        return f"{action.action.value} with agent {action.target}"
    if isinstance(action, DefendAction):
        return f"defend ({action.position.x}, {action.position.y})"
    return f"explore ({action.target_position.x}, {action.target_position.y})"


class OutcomeStatus(str, Enum):
    """Result states for an executed action intent."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class ExecutionOutcome:
    """Result of applying one action intent to the world."""

    agent_id: int
    status: OutcomeStatus
    message: str

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED
