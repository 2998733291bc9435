"""Fuses utility, GOAP and HTN output into one ranked decision list per agent."""

from __future__ import annotations

import logging

from dominion_ai.constants import EXPLORE_GOAL_TURN_LIMIT, GOAL_TRAIT_THRESHOLD, MAX_ACTIONS_PER_AGENT
from dominion_ai.models import ActionIntent, ActionKind
from dominion_ai.planning.engine import Decisions
from dominion_ai.planning.goap import GoapPlanner, StrategicGoal
from dominion_ai.planning.htn import HtnPlanner, HtnTask
from dominion_ai.planning.utility import UtilityScorer
from dominion_ai.world.state import GameState, Personality


def strategic_goals(personality: Personality, turn: int) -> list[StrategicGoal]:
    """Goals activated by strong personality traits."""
    goals: list[StrategicGoal] = []
    if personality.land_hunger > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.EXPAND_TERRITORY)
    if personality.tech_focus > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.ADVANCE_TECHNOLOGY)
    if personality.industry_focus > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.DEVELOP_ECONOMY)
    if personality.militarism > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.BUILD_MILITARY)
    if personality.interventionism > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.ESTABLISH_DIPLOMACY)
    if personality.isolationism > GOAL_TRAIT_THRESHOLD:
        goals.append(StrategicGoal.DEFEND_TERRITORY)
    if personality.exploration_drive > GOAL_TRAIT_THRESHOLD and turn < EXPLORE_GOAL_TURN_LIMIT:
        goals.append(StrategicGoal.EXPLORE_TERRITORY)
    return goals


def htn_tasks(personality: Personality) -> list[HtnTask]:
    tasks: list[HtnTask] = []
    if personality.interventionism > 0.5:
        tasks.append(HtnTask.DIPLOMATIC_CAMPAIGN)
    if personality.land_hunger > 0.7 and personality.militarism > 0.5:
        tasks.append(HtnTask.CONQUEST_CAMPAIGN)
    if personality.industry_focus > 0.7:
        tasks.append(HtnTask.ECONOMIC_DEVELOPMENT)
    if personality.tech_focus > 0.7:
        tasks.append(HtnTask.TECHNOLOGICAL_ADVANCEMENT)
    if personality.isolationism > 0.5:
        tasks.append(HtnTask.DEFENSIVE_PREPARATION)
    return tasks


def weighted_priority(action: ActionIntent, personality: Personality) -> float:
    """Personality-weighted ranking key; the intent's own priority is not consulted."""
    kind = action.kind
    if kind is ActionKind.EXPAND:
        return personality.land_hunger * 1.3
    if kind is ActionKind.RESEARCH:
        return personality.tech_focus * 1.2
    if kind is ActionKind.BUILD_UNIT:
        return personality.militarism * 1.1
    if kind is ActionKind.BUILD_BUILDING:
        return personality.industry_focus * 1.0
    if kind is ActionKind.TRADE:
        return personality.industry_focus * 0.9
    if kind is ActionKind.ATTACK:
        return personality.militarism * personality.risk_tolerance * 1.3
    if kind is ActionKind.DIPLOMACY:
        return (1.0 - personality.isolationism) * 0.8
    if kind is ActionKind.DEFEND:
        return 1.5
    return personality.exploration_drive * 1.15


class Coordinator:
    """Owns one instance of each planner and the per-agent decision cache."""

    def __init__(
        self,
        *,
        utility: UtilityScorer | None = None,
        goap: GoapPlanner | None = None,
        htn: HtnPlanner | None = None,
        max_actions: int = MAX_ACTIONS_PER_AGENT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.utility = utility or UtilityScorer()
        self.goap = goap or GoapPlanner()
        self.htn = htn or HtnPlanner()
        self._max_actions = max_actions
        self._logger = logger or logging.getLogger("dominion_ai.coordinator")
        self._cache: Decisions = {}

    @property
    def cache(self) -> Decisions:
        return self._cache

    def generate_decisions(self, world: GameState) -> Decisions:
        """Plan every agent in ``world`` and replace the cache with the result."""
        decisions = {agent_id: self._plan(agent_id, world) for agent_id in world.agents}
        self._cache = dict(decisions)
        return decisions

    def decide_for_agent(self, agent_id: int, world: GameState) -> list[ActionIntent]:
        """Plan one agent and refresh only its cache slot.

        Slots of agents that have left ``world`` are dropped, and an unknown
        ``agent_id`` gets an empty list without a slot.
        """
        for stale in [cached for cached in self._cache if cached not in world.agents]:
            del self._cache[stale]
        if agent_id not in world.agents:
            return []
        actions = self._plan(agent_id, world)
        self._cache[agent_id] = actions
        return actions

    def clear_cache(self) -> None:
        self._cache.clear()

    def _plan(self, agent_id: int, world: GameState) -> list[ActionIntent]:
        agent = world.agents.get(agent_id)
        if agent is None:
            return []
        personality = agent.personality

        actions: list[ActionIntent] = list(self.utility.evaluate(agent_id, agent, world))

        goals = strategic_goals(personality, world.turn)
        for goal in goals:
            plan = self.goap.plan_for_goal(agent_id, goal, world)
            if plan:
                actions.extend(plan)

        tasks = htn_tasks(personality)
        for task in tasks:
            decomposition = self.htn.decompose_task(agent_id, task, world)
            if decomposition:
                actions.extend(decomposition)

        actions.sort(key=lambda action: weighted_priority(action, personality), reverse=True)
        selected = actions[: self._max_actions]
        self._logger.debug(
            "agent_decisions_fused",
            extra={
                "agent_id": agent_id,
                "candidates": len(actions),
                "selected": len(selected),
                "goals": [goal.value for goal in goals],
                "tasks": [task.value for task in tasks],
            },
        )
        return selected
