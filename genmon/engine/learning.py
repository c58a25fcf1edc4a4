"""Learning — nudge an agent's DNA after a launch outcome is known.

A win reinforces every trait a little; there is no attempt to credit
the trait that actually caused the win. A bad loss makes the agent
more cautious and more analytical.
"""

from __future__ import annotations

import random
from typing import Any

from genmon.engine.dna import clamp_trait
from genmon.types import Agent

WIN_PNL = 10.0
BAD_LOSS_PNL = -20.0

_default_rng = random.Random()


def learn(agent: Agent, pnl: float, rng: random.Random | None = None) -> dict[str, int]:
    """Partial DNA update for one realised PnL. Empty when nothing changes."""
    rng = rng or _default_rng
    dna = agent.dna
    if pnl > WIN_PNL:
        return {
            "risk_tolerance": clamp_trait(dna.risk_tolerance + rng.randrange(3)),
            "creativity": clamp_trait(dna.creativity + rng.randrange(3)),
            "social_savvy": clamp_trait(dna.social_savvy + rng.randrange(2)),
            "analytical_depth": clamp_trait(dna.analytical_depth + rng.randrange(2)),
        }
    if pnl < BAD_LOSS_PNL:
        return {
            "risk_tolerance": clamp_trait(dna.risk_tolerance - rng.randrange(2, 7)),
            "analytical_depth": clamp_trait(dna.analytical_depth + rng.randrange(1, 5)),
        }
    return {}


def outcome_update(agent: Agent, pnl: float, rng: random.Random | None = None) -> dict[str, Any]:
    """Full patch for an agent that contributed to a resolved launch.

    Counters, PnL and DNA change together so the caller can apply them
    in a single update. Any positive PnL counts as a success.
    """
    is_win = pnl > 0
    return {
        "success_count": agent.success_count + (1 if is_win else 0),
        "fail_count": agent.fail_count + (0 if is_win else 1),
        "launch_count": agent.launch_count + 1,
        "total_pnl": agent.total_pnl + pnl,
        "best_launch_pnl": max(agent.best_launch_pnl, pnl),
        "dna": agent.dna.merged(learn(agent, pnl, rng)),
    }
