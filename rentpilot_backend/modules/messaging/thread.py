"""Client-side state of one lease message thread.

The view holds what a participant currently sees. Its own sends are shown
as soon as the server accepts them, realtime echoes of those sends are
skipped, and events from the other participant are merged by id. When an
event arrives whose sequence skips past what the view holds, something was
missed and the thread is reloaded from the server.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable

from ...core.realtime import EventType, RealtimeEvent
from ...core.utils import as_utc
from .schemas import MessageResponse

logger = logging.getLogger(__name__)

FetchMessages = Callable[[int | None], Awaitable[list[MessageResponse]]]


class MessageThreadView:
    def __init__(self, lease_id: uuid.UUID, user_id: uuid.UUID, fetch: FetchMessages):
        """
        Args:
            lease_id: Lease whose thread is shown
            user_id: The viewing participant
            fetch: Loads messages after a sequence (``None`` for the whole thread)
        """
        self.lease_id = lease_id
        self.user_id = user_id
        self._fetch = fetch
        self._messages: dict[uuid.UUID, MessageResponse] = {}
        self.reloads = 0

    @property
    def messages(self) -> list[MessageResponse]:
        return sorted(
            self._messages.values(), key=lambda m: (as_utc(m.created_at), m.sequence)
        )

    @property
    def last_sequence(self) -> int:
        return max((m.sequence for m in self._messages.values()), default=0)

    async def load(self) -> list[MessageResponse]:
        """Replace the view with the full thread from the server."""
        fetched = await self._fetch(None)
        self._messages = {m.id: m for m in fetched}
        self.reloads += 1
        return self.messages

    def add_own(self, message: MessageResponse) -> None:
        """Show a message the viewer just sent."""
        self._messages[message.id] = message

    async def apply_event(self, event: RealtimeEvent) -> bool:
        """Merge a realtime event. Returns True if the view changed."""
        if event.type != EventType.INSERT or event.table != "messages":
            return False

        message = MessageResponse.model_validate(event.record)
        if message.lease_id != self.lease_id:
            return False
        if message.sender_id == self.user_id:
            return False
        if message.id in self._messages:
            return False

        if message.sequence > self.last_sequence + 1:
            logger.info(
                "Message sequence gap, reloading thread",
                extra={
                    "lease_id": str(self.lease_id),
                    "expected": self.last_sequence + 1,
                    "received": message.sequence,
                },
            )
            await self.load()
            return True

        self._messages[message.id] = message
        return True
