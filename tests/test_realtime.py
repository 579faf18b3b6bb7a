"""Realtime hub and websocket subscription tests."""

import asyncio
import uuid

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from rentpilot_backend.core.realtime import (
    EventType,
    RealtimeEvent,
    RealtimeHub,
    stream_topic,
)
from rentpilot_backend.main import app
from rentpilot_backend.modules.auth.dependencies import WS_UNAUTHORIZED


def event(**record) -> RealtimeEvent:
    return RealtimeEvent(type=EventType.INSERT, table="messages", record=record)


async def test_publish_reaches_every_subscriber_of_the_topic():
    hub = RealtimeHub()
    first = hub.subscribe("messages:1")
    second = hub.subscribe("messages:1")
    other = hub.subscribe("messages:2")

    assert await hub.publish("messages:1", event(id="a")) == 2

    assert (await first.get(timeout=1)).record == {"id": "a"}
    assert (await second.get(timeout=1)).record == {"id": "a"}
    assert other.pending() == 0


async def test_slow_subscriber_drops_instead_of_blocking():
    hub = RealtimeHub(max_queue=1)
    subscription = hub.subscribe("messages:1")

    assert await hub.publish("messages:1", event(id="a")) == 1
    assert await hub.publish("messages:1", event(id="b")) == 0
    assert subscription.pending() == 1


async def test_closed_subscription_receives_nothing():
    hub = RealtimeHub()
    subscription = hub.subscribe("messages:1")
    subscription.close()

    assert await hub.publish("messages:1", event(id="a")) == 0
    assert hub.subscriber_count("messages:1") == 0


class FakeWebSocket:
    """Collects sent frames; ``receive_text`` blocks until ``disconnect``."""

    def __init__(self):
        self.sent: list[dict] = []
        self.received = asyncio.Event()
        self._closed = asyncio.Event()

    async def send_json(self, data):
        self.sent.append(data)
        self.received.set()

    async def receive_text(self):
        await self._closed.wait()
        raise WebSocketDisconnect(code=1000)

    def disconnect(self):
        self._closed.set()


async def test_stream_relays_events_for_the_socket_lifetime():
    hub = RealtimeHub()
    socket = FakeWebSocket()
    task = asyncio.create_task(stream_topic(socket, hub, "notifications:1"))

    while hub.subscriber_count("notifications:1") == 0:
        await asyncio.sleep(0)

    await hub.publish("notifications:1", event(id="a"))
    await asyncio.wait_for(socket.received.wait(), timeout=1)

    socket.disconnect()
    await asyncio.wait_for(task, timeout=1)

    assert socket.sent[0]["record"] == {"id": "a"}
    assert socket.sent[0]["type"] == "INSERT"
    assert hub.subscriber_count("notifications:1") == 0


@pytest.mark.parametrize(
    "path",
    [
        "/api/ws/notifications",
        "/api/ws/auth",
        f"/api/ws/leases/{uuid.uuid4()}/messages",
    ],
)
def test_websocket_without_valid_token_is_closed(path):
    client = TestClient(app)
    for url in (path, f"{path}?token=not-a-jwt"):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(url) as websocket:
                websocket.receive_text()
        assert exc_info.value.code == WS_UNAUTHORIZED
