"""Launch executors — turn an approved proposal into a token.

The swarm only needs the report: did it work, where does the token
live, and was it real. ``SimulatedLaunchExecutor`` is the default and
never touches a chain; an on-chain executor implements the same
protocol.
"""

from __future__ import annotations

import random
from typing import Protocol

from pydantic import BaseModel

from genmon.types import LaunchMode, LaunchProposal

SIMULATED_LAUNCH_PRICE = 0.000001  # bonding-curve starting price


class LaunchResult(BaseModel):
    success: bool
    token_address: str | None = None
    mode: LaunchMode = "simulation"
    tx_hash: str | None = None
    launch_price: float | None = None
    error: str = ""


class LaunchExecutor(Protocol):
    async def execute(self, proposal: LaunchProposal) -> LaunchResult: ...


class SimulatedLaunchExecutor:
    """Pretends to deploy: returns a random address and the curve start price."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def _hex(self, nbytes: int) -> str:
        return "0x" + "".join(f"{self._rng.randrange(256):02x}" for _ in range(nbytes))

    async def execute(self, proposal: LaunchProposal) -> LaunchResult:
        return LaunchResult(
            success=True,
            token_address=self._hex(20),
            mode="simulation",
            tx_hash=self._hex(32),
            launch_price=SIMULATED_LAUNCH_PRICE,
        )
