"""Event Bus — pub/sub with wildcard matching.

The orchestrator announces swarm happenings here (launches, births,
deaths, price moves) and collaborators such as notifications subscribe.
Topic wildcards: "agent.*" matches "agent.born" and "agent.died".

Handlers are fire-and-forget: a failing handler is logged and never
reaches the emitter.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Awaitable

from pydantic import BaseModel, Field

from genmon.types import new_id

EventHandler = Callable[["Event"], Awaitable[None]]

_logger = logging.getLogger(__name__)

# Topics emitted by the swarm
AGENT_CREATED = "agent.created"
AGENT_BORN = "agent.born"
AGENT_DIED = "agent.died"
SWARM_LAUNCH = "swarm.launch"
SWARM_OPPORTUNITY = "swarm.opportunity"
LAUNCH_PRICE_MOVE = "launch.price_move"
DAEMON_ERROR = "swarm.daemon_error"


class Event(BaseModel):
    """A swarm event."""

    id: str = Field(default_factory=new_id)
    topic: str
    data: dict[str, Any] = Field(default_factory=dict)
    source: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class EventBus:
    """Async pub/sub event bus with wildcard topic matching."""

    def __init__(self, history_limit: int = 500) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)
        self._history: list[Event] = []
        self._history_limit = history_limit

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        self._subscribers[pattern].append(handler)

    def unsubscribe(self, pattern: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(pattern, [])
        if handler in handlers:
            handlers.remove(handler)

    async def emit(self, topic: str, data: dict | None = None, source: str = "") -> Event:
        """Emit an event to all matching subscribers."""
        event = Event(topic=topic, data=data or {}, source=source)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit:]

        tasks = []
        for pattern, handlers in self._subscribers.items():
            if fnmatch.fnmatch(topic, pattern):
                tasks.extend(handler(event) for handler in handlers)

        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for r in results:
                if isinstance(r, Exception):
                    _logger.warning("Handler for %s failed: %s", topic, r)

        return event

    def history(self, topic_filter: str = "*", limit: int = 50) -> list[Event]:
        """Recent events, newest first, optionally filtered by topic pattern."""
        if topic_filter == "*":
            events = self._history
        else:
            events = [e for e in self._history if fnmatch.fnmatch(e.topic, topic_filter)]
        return list(reversed(events[-limit:]))

    @property
    def subscriber_count(self) -> int:
        return sum(len(h) for h in self._subscribers.values())
