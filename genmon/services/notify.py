"""Notifications — tell humans what the swarm just did.

Events are POSTed as JSON to a webhook (a Telegram/Discord relay, for
example). Delivery is best effort: failures are logged and reported as
``False``, never raised, and never affect swarm state.
"""

from __future__ import annotations

import logging
from typing import Literal

import httpx
from pydantic import BaseModel, Field

from genmon.events.bus import (
    AGENT_BORN,
    AGENT_DIED,
    LAUNCH_PRICE_MOVE,
    SWARM_LAUNCH,
    SWARM_OPPORTUNITY,
    Event,
    EventBus,
)

_logger = logging.getLogger(__name__)

OPPORTUNITY_ALERT_SCORE = 75
PRICE_MOVE_ALERT_PCT = 10.0

Urgency = Literal["low", "medium", "high"]


class NotifyField(BaseModel):
    name: str
    value: str


class NotifyEvent(BaseModel):
    type: Literal["launch", "opportunity", "evolution", "performance", "death", "custom"]
    title: str
    message: str
    fields: list[NotifyField] = Field(default_factory=list)
    urgency: Urgency = "medium"


class NotificationService:
    """Webhook notifier with preset alerts for swarm events."""

    def __init__(self, webhook_url: str = "", timeout: float = 5.0) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self.sent: list[NotifyEvent] = []

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, event: NotifyEvent) -> bool:
        if not self.enabled:
            return False
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._webhook_url, json=event.model_dump())
                resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            _logger.warning("Notification '%s' not delivered: %s", event.title, e)
            return False
        self.sent.append(event)
        return True

    # ── Presets ─────────────────────────────────────────────────

    async def launch_alert(
        self, token_name: str, token_symbol: str, confidence: int, mode: str,
        tx_hash: str | None = None,
    ) -> bool:
        message = f"Confidence: {confidence}%\nMode: {mode}"
        if tx_hash:
            message += f"\nTX: {tx_hash[:20]}..."
        return await self.send(NotifyEvent(
            type="launch",
            title=f"Token Launched: {token_name} ({token_symbol})",
            message=message,
            fields=[
                NotifyField(name="Token", value=f"{token_name} ({token_symbol})"),
                NotifyField(name="Confidence", value=f"{confidence}%"),
                NotifyField(name="Mode", value=mode),
            ],
            urgency="high" if confidence >= 85 else "medium",
        ))

    async def opportunity_alert(self, topic: str, score: int, source: str) -> bool:
        if score < OPPORTUNITY_ALERT_SCORE:
            return False
        return await self.send(NotifyEvent(
            type="opportunity",
            title=f"High Opportunity: {topic}",
            message=f"Score: {score}/100\nSource: {source}\nThe swarm is evaluating it.",
            fields=[
                NotifyField(name="Topic", value=topic),
                NotifyField(name="Score", value=f"{score}/100"),
            ],
            urgency="high" if score >= 90 else "medium",
        ))

    async def evolution_alert(
        self, parent_a: str, parent_b: str, child_name: str, generation: int,
    ) -> bool:
        return await self.send(NotifyEvent(
            type="evolution",
            title=f"New Agent Born: {child_name}",
            message=f"Parents: {parent_a} x {parent_b}\nGeneration: {generation}",
            urgency="low",
        ))

    async def performance_alert(self, token_name: str, pnl_pct: float, volume_24h: float) -> bool:
        if abs(pnl_pct) < PRICE_MOVE_ALERT_PCT:
            return False
        direction = "pumping" if pnl_pct > 0 else "dumping"
        return await self.send(NotifyEvent(
            type="performance",
            title=f"{token_name}: {pnl_pct:+.1f}%",
            message=f"24h Volume: ${volume_24h:,.0f}\nToken is {direction}.",
            urgency="high" if abs(pnl_pct) > 50 else "medium",
        ))

    async def death_alert(self, agent_name: str, reason: str) -> bool:
        return await self.send(NotifyEvent(
            type="death",
            title=f"Agent Eliminated: {agent_name}",
            message=f"Reason: {reason}\nNatural selection removed this agent from the swarm.",
            urgency="low",
        ))

    # ── Event bus wiring ────────────────────────────────────────

    def attach(self, bus: EventBus) -> None:
        """Forward swarm events from the bus as alerts."""
        bus.subscribe(SWARM_LAUNCH, self._on_launch)
        bus.subscribe(SWARM_OPPORTUNITY, self._on_opportunity)
        bus.subscribe(AGENT_BORN, self._on_birth)
        bus.subscribe(AGENT_DIED, self._on_death)
        bus.subscribe(LAUNCH_PRICE_MOVE, self._on_price_move)

    async def _on_launch(self, event: Event) -> None:
        d = event.data
        await self.launch_alert(
            d.get("token_name", ""), d.get("token_symbol", ""),
            d.get("confidence", 0), d.get("mode", "simulation"), d.get("tx_hash"),
        )

    async def _on_opportunity(self, event: Event) -> None:
        d = event.data
        await self.opportunity_alert(d.get("topic", ""), d.get("score", 0), d.get("source", ""))

    async def _on_birth(self, event: Event) -> None:
        d = event.data
        await self.evolution_alert(
            d.get("parent_a_name", ""), d.get("parent_b_name", ""),
            d.get("child_name", ""), d.get("generation", 0),
        )

    async def _on_death(self, event: Event) -> None:
        d = event.data
        await self.death_alert(d.get("name", ""), d.get("reason", ""))

    async def _on_price_move(self, event: Event) -> None:
        d = event.data
        await self.performance_alert(
            d.get("token_name", ""), d.get("price_change", 0.0), d.get("volume_24h", 0.0),
        )
