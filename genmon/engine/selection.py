"""Natural selection — which agents the swarm lets go."""

from __future__ import annotations

from genmon.types import Agent

GRACE_LAUNCHES = 3
LOW_WIN_RATE = 0.15
LOW_WIN_RATE_MIN_LAUNCHES = 5
RUIN_PNL = -200.0


def should_die(agent: Agent) -> bool:
    if agent.launch_count < GRACE_LAUNCHES:
        return False
    if agent.launch_count >= LOW_WIN_RATE_MIN_LAUNCHES and agent.win_rate < LOW_WIN_RATE:
        return True
    return agent.total_pnl < RUIN_PNL


def select_for_death(population: list[Agent]) -> list[Agent]:
    """Alive agents that fail the survival test."""
    return [a for a in population if a.alive and should_die(a)]
