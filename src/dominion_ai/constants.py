"""Tunable weights, thresholds and costs shared by planners and execution."""

from __future__ import annotations

# Utility scoring
UTILITY_THRESHOLD = 0.3
EXPANSION_LAND_DIVISOR = 8.0
THREAT_RADIUS = 20.0
THREAT_CAP = 2.0
ECONOMIC_PRESSURE_CAP = 2.0
TRADE_ROUTE_SATURATION = 5.0
TRADE_SCORE_FACTOR = 0.8
MAX_TRADE_DISTANCE = 30.0
RESEARCH_GOLD_SCALE = 100.0

TECHNOLOGY_TREE: tuple[str, ...] = (
    "Agriculture",
    "Bronze Working",
    "Writing",
    "Mathematics",
    "Iron Working",
)

EXPLORE_OFFSETS: tuple[tuple[int, int], ...] = (
    (5, 0),
    (-5, 0),
    (0, 5),
    (0, -5),
    (3, 3),
    (-3, 3),
    (3, -3),
    (-3, -3),
)

# Fallback positions
DEFAULT_CAPITAL = (50, 25)
DEFAULT_PARTNER_CAPITAL = (60, 25)

# Fixed-point scale for GOAP facts
FACT_SCALE = 100

# GOAP search
SEARCH_EXPANSION_LIMIT = 1000
GOLD_PER_COST_UNIT = 5.0

# HTN
HTN_MAX_DEPTH = 8
ALLIANCE_RELATION_THRESHOLD = 20
WAR_STRENGTH_RATIO = 0.7
HOSTILE_RELATION_THRESHOLD = -30

# Coordinator
GOAL_TRAIT_THRESHOLD = 0.6
EXPLORE_GOAL_TURN_LIMIT = 30
MAX_ACTIONS_PER_AGENT = 5

# Execution
RESEARCH_COST = 50.0
UNIT_COST = 30.0
BUILDING_COST = 25.0
UNIT_STRENGTH = 10.0
TRADE_ROUTE_VALUE = 10.0
TRADE_ROUTE_SECURITY = 0.8
TRADE_INCOME_BONUS = 5.0
WAR_RELATION_PENALTY = 50
NEGOTIATION_TURNS = 3
DEFEND_RADIUS = 5.0
TERRITORY_CONTROL_STRENGTH = 1.0

# Headless simulation
INCOME_GROWTH_RATE = 1.001
