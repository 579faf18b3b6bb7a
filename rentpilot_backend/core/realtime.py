"""
In-process real-time hub.

Topics are plain strings (``messages:{lease_id}``, ``notifications:{user_id}``,
``auth:{user_id}``). Each subscriber owns a bounded queue; publishing never
blocks on a slow consumer, it drops the event for that consumer instead.
"""

import asyncio
import enum
import logging
from typing import Annotated, Any

from fastapi import Depends, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field
from starlette.requests import HTTPConnection

from .utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class EventType(str, enum.Enum):
    """Kinds of events delivered to subscribers."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"


class RealtimeEvent(BaseModel):
    """A change event pushed to subscribers of a topic."""

    type: EventType
    table: str
    record: dict[str, Any] = Field(default_factory=dict)
    actor_id: str | None = None
    emitted_at: str = Field(default_factory=lambda: utc_now().isoformat())


def lease_messages_topic(lease_id: Any) -> str:
    return f"messages:{lease_id}"


def user_notifications_topic(user_id: Any) -> str:
    return f"notifications:{user_id}"


def user_auth_topic(user_id: Any) -> str:
    return f"auth:{user_id}"


class Subscription:
    """A single consumer of one topic."""

    def __init__(self, hub: "RealtimeHub", topic: str, max_queue: int):
        self.topic = topic
        self._hub = hub
        self._queue: asyncio.Queue[RealtimeEvent] = asyncio.Queue(maxsize=max_queue)
        self.closed = False

    def deliver(self, event: RealtimeEvent) -> bool:
        """Queue an event without blocking. Returns False if it was dropped."""
        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Dropping realtime event for slow subscriber",
                extra={"topic": self.topic, "event_type": event.type.value},
            )
            return False
        return True

    async def get(self, timeout: float | None = None) -> RealtimeEvent:
        """Wait for the next event."""
        if timeout is None:
            return await self._queue.get()
        return await asyncio.wait_for(self._queue.get(), timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._hub.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> RealtimeEvent:
        if self.closed:
            raise StopAsyncIteration
        return await self.get()


class RealtimeHub:
    """Topic based publish/subscribe registry."""

    def __init__(self, max_queue: int = DEFAULT_QUEUE_SIZE):
        self._max_queue = max_queue
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic, self._max_queue)
        self._subscriptions.setdefault(topic, []).append(subscription)
        logger.debug("Realtime subscription opened", extra={"topic": topic})
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.closed = True
        subscribers = self._subscriptions.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscriptions.pop(subscription.topic, None)
        logger.debug(
            "Realtime subscription closed", extra={"topic": subscription.topic}
        )

    async def publish(self, topic: str, event: RealtimeEvent) -> int:
        """Fan an event out to every subscriber of ``topic``.

        Returns:
            Number of subscribers the event was queued for.
        """
        delivered = 0
        for subscription in list(self._subscriptions.get(topic, [])):
            if subscription.deliver(event):
                delivered += 1
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))


def get_realtime_hub(connection: HTTPConnection) -> RealtimeHub:
    """Dependency returning the application's hub (HTTP and WebSocket routes)."""
    return connection.app.state.realtime_hub


Hub = Annotated[RealtimeHub, Depends(get_realtime_hub)]


async def stream_topic(websocket: WebSocket, hub: RealtimeHub, topic: str) -> None:
    """Relay events on ``topic`` to an accepted websocket until it disconnects.

    The subscription lives exactly as long as the socket.
    """
    subscription = hub.subscribe(topic)

    async def forward() -> None:
        async for event in subscription:
            await websocket.send_json(event.model_dump(mode="json"))

    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Websocket disconnected", extra={"topic": topic})
    finally:
        subscription.close()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
