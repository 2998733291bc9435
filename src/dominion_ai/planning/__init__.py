"""Planning engines and the coordinator that fuses them."""

from .coordinator import Coordinator
from .engine import DecisionEngine, Decisions
from .facts import FactVector
from .goap import ActionTemplate, GoapPlanner, StrategicGoal
from .htn import HtnPlanner, HtnTask, Method, PrimitiveAction
from .utility import UtilityScorer, UtilityStrategy

__all__ = [
    "ActionTemplate",
    "Coordinator",
    "DecisionEngine",
    "Decisions",
    "FactVector",
    "GoapPlanner",
    "HtnPlanner",
    "HtnTask",
    "Method",
    "PrimitiveAction",
    "StrategicGoal",
    "UtilityScorer",
    "UtilityStrategy",
]
