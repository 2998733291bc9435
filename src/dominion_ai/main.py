"""CLI startup entrypoint for Dominion AI."""

from __future__ import annotations

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from dominion_ai.config import settings
from dominion_ai.models import describe_action
from dominion_ai.orchestrator import TurnOrchestrator
from dominion_ai.planning import Coordinator, GoapPlanner, HtnPlanner
from dominion_ai.planning.coordinator import weighted_priority
from dominion_ai.scenario import ScenarioError, load_scenario
from dominion_ai.simulation import HeadlessSimulation, generate_world
from dominion_ai.telemetry import LoggingTelemetry, NullTelemetry, configure_logging
from dominion_ai.world import GameState

app = typer.Typer(help="Dominion AI turn planner")


def _build_coordinator() -> Coordinator:
    return Coordinator(
        goap=GoapPlanner(
            expansion_limit=settings.search_expansion_limit,
            deadline_ms=settings.planning_deadline_ms,
        ),
        htn=HtnPlanner(max_depth=settings.htn_max_depth),
    )


def _load_world(scenario: str | None, agents: int, seed: int) -> GameState:
    path = scenario or settings.scenario_path
    if not path:
        try:
            return generate_world(agents, seed)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    try:
        return load_scenario(path)
    except ScenarioError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)


@app.command()
def start() -> None:
    """Show runtime planner configuration."""
    print(
        {
            "app_name": settings.app_name,
            "log_level": settings.log_level,
            "search_expansion_limit": settings.search_expansion_limit,
            "htn_max_depth": settings.htn_max_depth,
            "planning_deadline_ms": settings.planning_deadline_ms,
            "scenario_path": settings.scenario_path,
        }
    )


@app.command("plan")
def plan(
    scenario: str = typer.Option(None, help="Path to a JSON scenario file"),
    agents: int = typer.Option(settings.simulation_agents, help="Agents to generate when no scenario is given"),
    seed: int = typer.Option(settings.simulation_seed, help="Seed for the generated world"),
) -> None:
    """Run one planning pass and show the ranked decisions per agent."""
    configure_logging(settings.log_level)
    world = _load_world(scenario, agents, seed)
    decisions = _build_coordinator().generate_decisions(world)

    table = Table(title=f"Decisions for turn {world.turn}")
    table.add_column("Agent")
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Priority", justify="right")
    table.add_column("Weighted", justify="right")
    for agent_id in sorted(decisions):
        agent = world.agents[agent_id]
        actions = decisions[agent_id]
        if not actions:
            table.add_row(f"{agent.name} ({agent_id})", "-", "no decision", "-", "-")
            continue
        for index, action in enumerate(actions, start=1):
            table.add_row(
                f"{agent.name} ({agent_id})" if index == 1 else "",
                str(index),
                describe_action(action),
                f"{action.priority:.2f}",
                f"{weighted_priority(action, agent.personality):.2f}",
            )
    Console().print(table)


@app.command("simulate")
def simulate(
    turns: int = typer.Option(settings.simulation_turns, help="Number of turns to run"),
    agents: int = typer.Option(settings.simulation_agents, help="Agents to generate when no scenario is given"),
    seed: int = typer.Option(settings.simulation_seed, help="Seed for the generated world"),
    scenario: str = typer.Option(None, help="Path to a JSON scenario file"),
    top: int = typer.Option(5, help="How many leaderboard entries to show"),
) -> None:
    """Run a headless simulation and print performance and standings."""
    configure_logging(settings.log_level)
    if turns < 0:
        raise typer.BadParameter("--turns must not be negative")

    world = _load_world(scenario, agents, seed)
    orchestrator = TurnOrchestrator(_build_coordinator())
    telemetry = LoggingTelemetry() if settings.telemetry_enabled else NullTelemetry()
    report = HeadlessSimulation(world, orchestrator=orchestrator, telemetry=telemetry).run(turns)

    print({"summary": report.summary()})
    print(
        {
            "standings": [
                {"rank": rank, "agent": standing.name, "id": standing.agent_id, "score": round(standing.score)}
                for rank, standing in enumerate(report.standings[:top], start=1)
            ]
        }
    )


if __name__ == "__main__":
    app()
