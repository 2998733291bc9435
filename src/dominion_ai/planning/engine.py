"""Core planning contracts for producing per-agent decisions."""

from __future__ import annotations

from typing import Protocol

from dominion_ai.models import ActionIntent
from dominion_ai.world.state import GameState

Decisions = dict[int, list[ActionIntent]]


class DecisionEngine(Protocol):
    """Turns a world snapshot into ranked action intents."""

    def generate_decisions(self, world: GameState) -> Decisions:
        """Return ordered intents for every agent in ``world``."""

    def decide_for_agent(self, agent_id: int, world: GameState) -> list[ActionIntent]:
        """Return ordered intents for one agent."""
