"""Tests for webhook notifications."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from genmon.events.bus import AGENT_DIED, LAUNCH_PRICE_MOVE, SWARM_LAUNCH, EventBus
from genmon.services.notify import NotificationService, NotifyEvent

WEBHOOK = "http://relay.local/hook"


def _client(error=None):
    mock_response = MagicMock()
    mock_response.raise_for_status = MagicMock(return_value=None)
    instance = AsyncMock()
    if error is not None:
        instance.post = AsyncMock(side_effect=error)
    else:
        instance.post = AsyncMock(return_value=mock_response)
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


@pytest.mark.asyncio
async def test_disabled_without_webhook():
    svc = NotificationService()
    assert not svc.enabled
    assert await svc.send(NotifyEvent(type="custom", title="t", message="m")) is False


@pytest.mark.asyncio
async def test_send_posts_json():
    svc = NotificationService(webhook_url=WEBHOOK)
    with patch("genmon.services.notify.httpx.AsyncClient") as MockClient:
        instance = _client()
        MockClient.return_value = instance
        ok = await svc.launch_alert("NeoMoon", "NEOM", 90, "simulation", "0x" + "ab" * 32)

    assert ok
    args, kwargs = instance.post.call_args
    assert args[0] == WEBHOOK
    body = kwargs["json"]
    assert body["type"] == "launch"
    assert body["title"] == "Token Launched: NeoMoon (NEOM)"
    assert body["urgency"] == "high"
    assert len(svc.sent) == 1


@pytest.mark.asyncio
async def test_delivery_failure_returns_false():
    svc = NotificationService(webhook_url=WEBHOOK)
    with patch("genmon.services.notify.httpx.AsyncClient") as MockClient:
        MockClient.return_value = _client(error=httpx.ConnectError("refused"))
        assert await svc.death_alert("Nova-G1", "Poor win rate") is False
    assert svc.sent == []


@pytest.mark.asyncio
async def test_malformed_webhook_url_returns_false():
    svc = NotificationService(webhook_url="http://[relay")
    with patch("genmon.services.notify.httpx.AsyncClient") as MockClient:
        MockClient.return_value = _client(error=httpx.InvalidURL("Invalid IPv6 URL"))
        assert await svc.death_alert("Nova-G1", "Poor win rate") is False
    assert svc.sent == []


@pytest.mark.asyncio
async def test_threshold_presets_skip_small_signals():
    svc = NotificationService(webhook_url=WEBHOOK)
    with patch("genmon.services.notify.httpx.AsyncClient") as MockClient:
        instance = _client()
        MockClient.return_value = instance
        assert await svc.opportunity_alert("Pepe", 74, "coingecko") is False
        assert await svc.performance_alert("NeoMoon", 9.9, 1000.0) is False
        assert await svc.performance_alert("NeoMoon", -60.0, 1000.0) is True

    assert instance.post.await_count == 1
    assert svc.sent[0].title == "NeoMoon: -60.0%"
    assert svc.sent[0].urgency == "high"


@pytest.mark.asyncio
async def test_attach_forwards_bus_events():
    bus = EventBus()
    svc = NotificationService(webhook_url=WEBHOOK)
    svc.attach(bus)
    with patch("genmon.services.notify.httpx.AsyncClient") as MockClient:
        MockClient.return_value = _client()
        await bus.emit(SWARM_LAUNCH, {
            "token_name": "NeoMoon", "token_symbol": "NEOM", "confidence": 80, "mode": "simulation",
        })
        await bus.emit(AGENT_DIED, {"name": "Nova-G1", "reason": "Poor win rate / negative PnL"})
        await bus.emit(LAUNCH_PRICE_MOVE, {"token_name": "NeoMoon", "price_change": 3.0})

    assert [e.type for e in svc.sent] == ["launch", "death"]
    assert svc.sent[0].urgency == "medium"
