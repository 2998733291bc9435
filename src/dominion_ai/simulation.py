"""Headless multi-turn simulation driver with per-turn metrics."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from itertools import combinations

from dominion_ai.constants import INCOME_GROWTH_RATE
from dominion_ai.orchestrator import TurnOrchestrator
from dominion_ai.telemetry.logging import NullTelemetry, Telemetry
from dominion_ai.world.state import (
    Agent,
    Building,
    BuildingType,
    City,
    DiplomaticRelation,
    GameState,
    Military,
    MilitaryUnit,
    Personality,
    Position,
    Territory,
    UnitType,
    WorldMap,
)

CIVILIZATION_NAMES: tuple[str, ...] = (
    "Aurelia",
    "Borealis",
    "Calder",
    "Dravik",
    "Elyndor",
    "Falkrest",
    "Galvorn",
    "Harrowmere",
    "Istrand",
    "Jorvath",
    "Kessarine",
    "Lunmar",
    "Meridia",
    "Norhollow",
    "Ostrava",
    "Pellandor",
    "Quillon",
    "Rhovanis",
    "Sarkand",
    "Tyrellis",
)

MAX_PLACEMENT_ATTEMPTS = 1000


def _random_personality(rng: random.Random) -> Personality:
    return Personality(
        land_hunger=rng.uniform(0.2, 0.8),
        industry_focus=rng.uniform(0.2, 0.8),
        tech_focus=rng.uniform(0.2, 0.8),
        interventionism=rng.uniform(0.1, 0.7),
        risk_tolerance=rng.uniform(0.2, 0.8),
        honor_treaties=rng.uniform(0.3, 0.9),
        militarism=rng.uniform(0.2, 0.8),
        isolationism=rng.uniform(0.1, 0.6),
        exploration_drive=rng.uniform(0.2, 0.8),
    )


def _place_capitals(
    count: int,
    world_map: WorldMap,
    rng: random.Random,
    min_distance: float,
) -> list[Position]:
    placed: list[Position] = []
    for index in range(count):
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            candidate = Position(rng.randrange(1, world_map.width - 1), rng.randrange(1, world_map.height - 1))
            if all(candidate.distance_to(other) >= min_distance for other in placed):
                placed.append(candidate)
                break
        else:
            # Crowded map: fall back to a diagonal spread.
            fallback = Position(
                (index * 7 + 1) % world_map.width,
                (index * 3 + 1) % world_map.height,
            )
            placed.append(fallback)
    return placed


def generate_world(
    agent_count: int,
    seed: int,
    *,
    width: int = 100,
    height: int = 50,
    min_distance: float = 8.0,
) -> GameState:
    """Deterministically build a starting world for ``agent_count`` civilizations."""
    if agent_count < 1:
        raise ValueError("agent_count must be at least 1")
    if agent_count > len(CIVILIZATION_NAMES):
        raise ValueError(f"agent_count must be at most {len(CIVILIZATION_NAMES)}")

    rng = random.Random(seed)
    world = GameState(turn=1, world_map=WorldMap(width=width, height=height))
    capitals = _place_capitals(agent_count, world.world_map, rng, min_distance)

    for agent_id, (name, capital) in enumerate(zip(CIVILIZATION_NAMES, capitals), start=1):
        unit = MilitaryUnit(id=agent_id, owner=agent_id, unit_type=UnitType.INFANTRY, position=capital, strength=10.0)
        agent = Agent(
            id=agent_id,
            name=name,
            personality=_random_personality(rng),
            military=Military(units=[unit], total_strength=unit.strength),
            capital=capital,
            cities=[City(name=f"{name} Capital", position=capital, buildings=[Building(BuildingType.GRANARY)])],
            territories=[Territory(position=capital, owner=agent_id, control_strength=1.0)],
        )
        tile = world.world_map.tile_mut(capital)
        if tile is not None:
            tile.owner = agent_id
        world.agents[agent_id] = agent

    for agent_a, agent_b in combinations(sorted(world.agents), 2):
        world.diplomacy.add_relation(
            DiplomaticRelation(agent_a=agent_a, agent_b=agent_b, relation_value=rng.randint(-20, 40))
        )
    return world


def update_economies(world: GameState) -> None:
    for agent in world.agents.values():
        agent.economy.gold += agent.economy.income
        agent.economy.income *= INCOME_GROWTH_RATE


def update_diplomacy(world: GameState) -> None:
    """Count down negotiations and timed treaties, dropping the expired ones."""
    for negotiation in world.diplomacy.ongoing_negotiations:
        negotiation.turns_remaining -= 1
    world.diplomacy.ongoing_negotiations = [
        negotiation for negotiation in world.diplomacy.ongoing_negotiations if negotiation.turns_remaining > 0
    ]

    for relation in world.diplomacy.relations.values():
        for treaty in relation.treaties:
            if treaty.turns_remaining is not None:
                treaty.turns_remaining -= 1
        relation.treaties = [
            treaty for treaty in relation.treaties if treaty.turns_remaining is None or treaty.turns_remaining > 0
        ]


@dataclass(slots=True)
class TurnMetrics:
    turn: int
    duration_ms: float
    decisions: int
    executions: int
    failures: int


@dataclass(slots=True)
class Standing:
    agent_id: int
    name: str
    score: float


@dataclass(slots=True)
class SimulationReport:
    """Aggregate results of one headless run."""

    turns: list[TurnMetrics] = field(default_factory=list)
    standings: list[Standing] = field(default_factory=list)
    total_ms: float = 0.0
    final_turn: int = 0

    @property
    def average_turn_ms(self) -> float:
        return self.total_ms / len(self.turns) if self.turns else 0.0

    @property
    def max_turn_ms(self) -> float:
        return max((metrics.duration_ms for metrics in self.turns), default=0.0)

    @property
    def average_decisions(self) -> float:
        return sum(metrics.decisions for metrics in self.turns) / len(self.turns) if self.turns else 0.0

    @property
    def average_executions(self) -> float:
        return sum(metrics.executions for metrics in self.turns) / len(self.turns) if self.turns else 0.0

    def summary(self) -> dict:
        return {
            "turns": len(self.turns),
            "final_turn": self.final_turn,
            "total_ms": round(self.total_ms, 2),
            "average_turn_ms": round(self.average_turn_ms, 3),
            "max_turn_ms": round(self.max_turn_ms, 3),
            "average_decisions": round(self.average_decisions, 2),
            "average_executions": round(self.average_executions, 2),
        }


def rank_agents(world: GameState) -> list[Standing]:
    """Leaderboard ordered by gold plus military strength."""
    standings = [
        Standing(agent_id=agent.id, name=agent.name, score=agent.economy.gold + agent.military.total_strength)
        for agent in world.agents.values()
    ]
    standings.sort(key=lambda standing: standing.score, reverse=True)
    return standings


class HeadlessSimulation:
    """Runs plan, execute and world update phases for a fixed number of turns."""

    def __init__(
        self,
        world: GameState,
        *,
        orchestrator: TurnOrchestrator | None = None,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.world = world
        self._orchestrator = orchestrator or TurnOrchestrator()
        self._telemetry = telemetry or NullTelemetry()
        self._logger = logger or logging.getLogger("dominion_ai.simulation")

    def step(self) -> TurnMetrics:
        started = time.perf_counter()
        decisions = self._orchestrator.generate_turn_decisions(self.world)
        outcomes = self._orchestrator.execute_decisions(decisions, self.world)
        update_economies(self.world)
        update_diplomacy(self.world)

        metrics = TurnMetrics(
            turn=self.world.turn,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            decisions=sum(len(actions) for actions in decisions.values()),
            executions=len(outcomes),
            failures=sum(1 for outcome in outcomes if not outcome.succeeded),
        )
        self.world.turn += 1
        self._telemetry.emit(
            "simulation_turn",
            {
                "turn": metrics.turn,
                "duration_ms": metrics.duration_ms,
                "decisions": metrics.decisions,
                "executions": metrics.executions,
                "failures": metrics.failures,
            },
        )
        return metrics

    def run(self, turns: int) -> SimulationReport:
        report = SimulationReport()
        self._logger.info("simulation_started", extra={"turns": turns, "agents": len(self.world.agents)})
        for _ in range(turns):
            if not self.world.agents:
                self._logger.warning("simulation_ended_early", extra={"turn": self.world.turn})
                break
            metrics = self.step()
            report.turns.append(metrics)
            report.total_ms += metrics.duration_ms

        report.final_turn = self.world.turn
        report.standings = rank_agents(self.world)
        self._logger.info("simulation_finished", extra=report.summary())
        return report


def run_simulation(
    turns: int,
    agent_count: int,
    seed: int,
    *,
    orchestrator: TurnOrchestrator | None = None,
    telemetry: Telemetry | None = None,
) -> SimulationReport:
    world = generate_world(agent_count, seed)
    return HeadlessSimulation(world, orchestrator=orchestrator, telemetry=telemetry).run(turns)
