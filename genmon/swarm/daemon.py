"""Swarm daemon — drives the swarm on two cadences.

A fast loop runs one consensus cycle every few seconds; a slow loop
tracks launched tokens, settles outcomes and runs selection and
breeding. Both loops share one lock, so the population only ever has
one writer at a time.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

from genmon.events.bus import DAEMON_ERROR
from genmon.swarm.orchestrator import EvolutionReport, SwarmCycleReport, SwarmOrchestrator

logger = structlog.get_logger()


class SwarmDaemon:
    """Background scheduler for cycles and evolution passes."""

    def __init__(
        self,
        orchestrator: SwarmOrchestrator,
        cycle_interval: float = 5.0,
        evolution_interval: float = 30.0,
    ) -> None:
        self._orchestrator = orchestrator
        self._cycle_interval = cycle_interval
        self._evolution_interval = evolution_interval
        self._lock = asyncio.Lock()
        self._running = False
        self._tasks: list[asyncio.Task] = []
        self.cycles_run = 0
        self.evolutions_run = 0

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(
                self._loop("cycle", self._cycle_interval, self.run_cycle), name="swarm-cycle",
            ),
            asyncio.create_task(
                self._loop("evolution", self._evolution_interval, self.run_evolution),
                name="swarm-evolution",
            ),
        ]
        logger.info(
            "swarm_daemon_started",
            cycle_interval=self._cycle_interval,
            evolution_interval=self._evolution_interval,
        )

    async def stop(self) -> None:
        self._running = False
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("swarm_daemon_stopped", cycles=self.cycles_run, evolutions=self.evolutions_run)

    async def run_cycle(self) -> SwarmCycleReport:
        async with self._lock:
            report = await self._orchestrator.run_full_cycle()
        self.cycles_run += 1
        return report

    async def run_evolution(self) -> EvolutionReport:
        async with self._lock:
            report = await self._orchestrator.track_launch_performance()
        self.evolutions_run += 1
        return report

    async def run_once(self) -> tuple[SwarmCycleReport, EvolutionReport]:
        """One cycle followed by one evolution pass."""
        return await self.run_cycle(), await self.run_evolution()

    @property
    def is_running(self) -> bool:
        return self._running

    async def _loop(
        self, name: str, interval: float, step: Callable[[], Awaitable[Any]],
    ) -> None:
        while self._running:
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break
            if not self._running:
                break
            try:
                await step()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("swarm_daemon_step_failed", loop=name, error=str(e))
                await self._orchestrator.event_bus.emit(
                    DAEMON_ERROR, {"loop": name, "error": str(e)}, source="swarm_daemon",
                )
