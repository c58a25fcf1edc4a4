"""Tests for the event bus."""

import pytest

from genmon.events.bus import AGENT_BORN, AGENT_DIED, SWARM_LAUNCH, Event, EventBus


@pytest.mark.asyncio
async def test_emit_and_subscribe():
    bus = EventBus()
    received = []

    async def handler(event: Event):
        received.append(event)

    bus.subscribe(SWARM_LAUNCH, handler)
    await bus.emit(SWARM_LAUNCH, {"token_name": "NeoMoon"}, source="swarm")

    assert len(received) == 1
    assert received[0].topic == SWARM_LAUNCH
    assert received[0].data["token_name"] == "NeoMoon"
    assert received[0].source == "swarm"


@pytest.mark.asyncio
async def test_wildcard_subscribe():
    bus = EventBus()
    received = []

    async def handler(event: Event):
        received.append(event)

    bus.subscribe("agent.*", handler)
    await bus.emit(AGENT_BORN, {"child_id": "a1"})
    await bus.emit(AGENT_DIED, {"agent_id": "a2"})
    await bus.emit(SWARM_LAUNCH)  # should NOT match

    assert [e.topic for e in received] == [AGENT_BORN, AGENT_DIED]


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = EventBus()
    received = []

    async def handler(event: Event):
        received.append(event)

    bus.subscribe("*", handler)
    assert bus.subscriber_count == 1
    bus.unsubscribe("*", handler)
    assert bus.subscriber_count == 0
    await bus.emit(SWARM_LAUNCH)
    assert received == []


@pytest.mark.asyncio
async def test_failing_handler_is_isolated():
    bus = EventBus()
    received = []

    async def broken(event: Event):
        raise RuntimeError("webhook down")

    async def healthy(event: Event):
        received.append(event)

    bus.subscribe("*", broken)
    bus.subscribe(SWARM_LAUNCH, healthy)
    event = await bus.emit(SWARM_LAUNCH, {"x": 1})

    assert event.topic == SWARM_LAUNCH
    assert len(received) == 1


@pytest.mark.asyncio
async def test_history_newest_first_and_filtered():
    bus = EventBus()
    await bus.emit(AGENT_BORN, {"n": 1})
    await bus.emit(SWARM_LAUNCH, {"n": 2})
    await bus.emit(AGENT_DIED, {"n": 3})

    assert [e.data["n"] for e in bus.history()] == [3, 2, 1]
    assert [e.data["n"] for e in bus.history("agent.*")] == [3, 1]
    assert [e.data["n"] for e in bus.history(limit=1)] == [3]


@pytest.mark.asyncio
async def test_history_limit():
    bus = EventBus(history_limit=5)
    for i in range(8):
        await bus.emit(SWARM_LAUNCH, {"i": i})
    history = bus.history(limit=50)
    assert len(history) == 5
    assert history[-1].data["i"] == 3
