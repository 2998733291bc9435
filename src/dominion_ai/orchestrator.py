"""Per-turn planning with action-count cooldowns."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from dominion_ai.execution import ActionExecutor
from dominion_ai.models import ActionIntent, ExecutionOutcome
from dominion_ai.planning.coordinator import Coordinator
from dominion_ai.planning.engine import DecisionEngine, Decisions
from dominion_ai.world.state import GameState


def cooldown_for(action_count: int) -> int:
    """Turns an agent sits out after receiving ``action_count`` actions."""
    if action_count <= 1:
        return 0
    if action_count <= 3:
        return 1
    return 2


class TurnOrchestrator:
    """Owns the cooldown map for one game session and gates planning with it."""

    def __init__(
        self,
        engine: DecisionEngine | None = None,
        *,
        executor: ActionExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine or Coordinator()
        self._executor = executor or ActionExecutor()
        self._logger = logger or logging.getLogger("dominion_ai.orchestrator")
        self._cooldowns: dict[int, int] = {}

    @property
    def engine(self) -> DecisionEngine:
        return self._engine

    @property
    def executor(self) -> ActionExecutor:
        return self._executor

    @property
    def cooldowns(self) -> dict[int, int]:
        return dict(self._cooldowns)

    def cooldown(self, agent_id: int) -> int:
        return self._cooldowns.get(agent_id, 0)

    def generate_turn_decisions(self, world: GameState) -> Decisions:
        """Plan every agent that is not cooling down and return the non-empty results."""
        for departed in [agent_id for agent_id in self._cooldowns if agent_id not in world.agents]:
            del self._cooldowns[departed]
        cooling = {agent_id for agent_id, turns in self._cooldowns.items() if turns > 0}
        for agent_id, turns in self._cooldowns.items():
            self._cooldowns[agent_id] = max(turns - 1, 0)

        decisions: Decisions = {}
        for agent_id in world.agents:
            if agent_id in cooling:
                self._logger.debug(
                    "agent_on_cooldown",
                    extra={"agent_id": agent_id, "remaining": self._cooldowns[agent_id], "turn": world.turn},
                )
                continue

            actions = self._engine.decide_for_agent(agent_id, world)
            if not actions:
                continue
            decisions[agent_id] = actions
            self._cooldowns[agent_id] = cooldown_for(len(actions))

        self._logger.info(
            "turn_decisions_generated",
            extra={
                "turn": world.turn,
                "planned_agents": len(decisions),
                "cooling_agents": len(cooling),
                "actions": sum(len(actions) for actions in decisions.values()),
            },
        )
        return decisions

    def execute_decisions(
        self,
        decisions: Mapping[int, Sequence[ActionIntent]],
        world: GameState,
    ) -> list[ExecutionOutcome]:
        return self._executor.execute_decisions(decisions, world)

    def reset(self) -> None:
        self._cooldowns.clear()
