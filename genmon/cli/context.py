"""CLI runtime context — bridges the sync CLI to the async swarm."""

from __future__ import annotations

import asyncio
import random
from typing import Any, Coroutine

from genmon.config import settings
from genmon.events.bus import EventBus
from genmon.services.market import MarketDataService
from genmon.services.notify import NotificationService
from genmon.storage.store import SwarmStore
from genmon.swarm.daemon import SwarmDaemon
from genmon.swarm.orchestrator import SwarmOrchestrator
from genmon.swarm.population import Population


class GenmonContext:
    """Singleton runtime context that holds all subsystem instances."""

    _instance: GenmonContext | None = None

    def __init__(self) -> None:
        self.rng = random.Random(settings.seed)
        self.event_bus = EventBus()
        self.store = SwarmStore(str(settings.db_path))
        self.market = None if settings.offline else MarketDataService(
            coingecko_url=settings.coingecko_url,
            dexscreener_url=settings.dexscreener_url,
            timeout=settings.market_timeout_seconds,
        )

        # Notifications ride on the event bus
        self.notifier = NotificationService(
            webhook_url=settings.notify_webhook_url,
            timeout=settings.notify_timeout_seconds,
        )
        self.notifier.attach(self.event_bus)

        self.population = Population()
        self.orchestrator = SwarmOrchestrator(
            population=self.population,
            market=self.market,
            store=self.store,
            event_bus=self.event_bus,
            rng=self.rng,
            topic_limit=settings.market_topic_limit,
            settle_seconds=settings.outcome_settle_seconds,
            min_breeding_population=settings.min_breeding_population,
            max_population=settings.max_population,
            breeding_chance=settings.breeding_chance,
        )
        self.daemon = SwarmDaemon(
            self.orchestrator,
            cycle_interval=settings.cycle_interval_seconds,
            evolution_interval=settings.evolution_interval_seconds,
        )
        self._loaded = False

    async def ensure_loaded(self) -> SwarmOrchestrator:
        """Open the store and load the saved swarm on first use."""
        if not self._loaded:
            settings.workspace_dir.mkdir(parents=True, exist_ok=True)
            settings.db_path.parent.mkdir(parents=True, exist_ok=True)
            await self.store.initialize()
            for agent in await self.store.load_agents():
                self.population.add_agent(agent)
            for proposal in reversed(await self.store.load_proposals(limit=200)):
                self.population.add_proposal(proposal)
            for entry in reversed(await self.store.load_breeding_log(limit=20)):
                self.population.add_breeding_log(entry)
            self._loaded = True
        return self.orchestrator

    @classmethod
    def get(cls) -> GenmonContext:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance


def run_async(coro: Coroutine) -> Any:
    """Run an async coroutine from sync CLI code."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        # Already inside an event loop (e.g. a notebook)
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    else:
        return asyncio.run(coro)
