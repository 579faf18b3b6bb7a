"""Lease messaging business logic.

A thread belongs to one lease and is visible to its landlord and its linked
tenant. Each message gets the next per-lease ``sequence`` number; two senders
racing for the same number are separated by the unique constraint and the
loser retries with a fresh number.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from ...core.realtime import (
    EventType,
    RealtimeEvent,
    RealtimeHub,
    lease_messages_topic,
)
from ...core.utils import display_name, is_blank
from ..auth.models import Profile
from ..auth.schemas import AuthenticatedUser
from ..lease_management import crud as lease_crud
from ..lease_management.models import Lease, LeaseStatus
from . import crud
from .models import Message
from .schemas import MessageResponse

logger = logging.getLogger(__name__)

# Lease states in which the thread accepts new messages
OPEN_LEASE_STATUSES = (LeaseStatus.ACTIVE, LeaseStatus.DRAFT)
SEND_ATTEMPTS = 3


def to_response(message: Message, sender: Profile | None) -> MessageResponse:
    if sender is None:
        sender_name = "Unknown"
    else:
        sender_name = display_name(sender.first_name, sender.last_name, sender.email)
    return MessageResponse(
        id=message.id,
        lease_id=message.lease_id,
        sender_id=message.sender_id,
        sender_name=sender_name,
        sequence=message.sequence,
        message=message.message,
        created_at=message.created_at,
    )


async def get_participant_lease(
    db: AsyncSession, lease_id: uuid.UUID, user_id: uuid.UUID
) -> Lease:
    lease = await lease_crud.get_lease_by_id(db, lease_id)
    if not lease:
        raise NotFoundError(f"Lease with ID {lease_id} not found")
    if user_id not in (lease.landlord_id, lease.tenant_id):
        raise PermissionError("access", "lease messages")
    return lease


async def fetch_messages(
    db: AsyncSession,
    lease_id: uuid.UUID,
    user_id: uuid.UUID,
    after_sequence: int | None = None,
) -> list[MessageResponse]:
    """All messages of the lease oldest first, or only those after a sequence."""
    await get_participant_lease(db, lease_id, user_id)
    rows = await crud.get_messages(db, lease_id, after_sequence=after_sequence)
    return [to_response(message, sender) for message, sender in rows]


async def send_message(
    db: AsyncSession,
    lease_id: uuid.UUID,
    sender: AuthenticatedUser,
    text: str,
    hub: RealtimeHub | None = None,
) -> MessageResponse:
    """Append a message to a lease thread and broadcast it.

    Raises:
        ValidationError: If the text is empty or whitespace
        BusinessLogicError: If the lease is expired
        NotFoundError / PermissionError: If the caller is not a participant
        ConflictError: If no sequence number could be claimed
    """
    if is_blank(text):
        raise ValidationError("Message cannot be empty", field="message")

    lease = await get_participant_lease(db, lease_id, sender.id)
    if lease.status not in OPEN_LEASE_STATUSES:
        raise BusinessLogicError(
            f"Cannot send messages on a lease in '{lease.status.value}' status"
        )

    body = text.strip()
    for attempt in range(1, SEND_ATTEMPTS + 1):
        sequence = await crud.next_sequence(db, lease_id)
        try:
            message = await crud.create_message(
                db, lease_id, sender.id, sequence, body
            )
            await db.commit()
            break
        except IntegrityError as e:
            await db.rollback()
            logger.warning(
                "Message sequence taken, retrying",
                extra={"lease_id": str(lease_id), "sequence": sequence, "attempt": attempt},
            )
            if attempt == SEND_ATTEMPTS:
                raise ConflictError(
                    "Message could not be sent, please retry",
                    details={"database_error": str(e.orig)},
                ) from e

    response = MessageResponse(
        id=message.id,
        lease_id=message.lease_id,
        sender_id=message.sender_id,
        sender_name=sender.full_name,
        sequence=message.sequence,
        message=message.message,
        created_at=message.created_at,
    )
    logger.info(
        "Message sent",
        extra={"lease_id": str(lease_id), "sequence": message.sequence},
    )

    if hub is not None:
        await hub.publish(
            lease_messages_topic(lease_id),
            RealtimeEvent(
                type=EventType.INSERT,
                table="messages",
                record=response.model_dump(mode="json"),
                actor_id=str(sender.id),
            ),
        )
    return response


async def unread_count(
    db: AsyncSession, user_id: uuid.UUID, lease_id: uuid.UUID | None = None
) -> int:
    """Messages from others the user has not marked read, in one or all leases."""
    if lease_id is not None:
        await get_participant_lease(db, lease_id, user_id)
    return await crud.count_unread(db, user_id, lease_id)


async def mark_as_read(
    db: AsyncSession, message_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    """Record that the user read a message. Repeating the call is a no-op."""
    message = await crud.get_message(db, message_id)
    if not message:
        raise NotFoundError(f"Message with ID {message_id} not found")
    await get_participant_lease(db, message.lease_id, user_id)

    if await crud.get_read_status(db, message_id, user_id):
        return
    try:
        await crud.add_read_statuses(db, [message_id], user_id)
        await db.commit()
    except IntegrityError:
        # Marked by a concurrent request
        await db.rollback()


async def mark_all_as_read(
    db: AsyncSession, lease_id: uuid.UUID, user_id: uuid.UUID
) -> int:
    """Mark every unread message of the lease read. Returns how many were marked."""
    await get_participant_lease(db, lease_id, user_id)
    unread_ids = await crud.get_unread_ids(db, user_id, lease_id)
    if not unread_ids:
        return 0
    try:
        count = await crud.add_read_statuses(db, unread_ids, user_id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return 0
    return count
