"""CRUD operations for messaging module."""

import uuid

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.models import Profile
from ..lease_management.models import Lease
from .models import Message, MessageReadStatus


async def next_sequence(db: AsyncSession, lease_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.coalesce(func.max(Message.sequence), 0)).where(
            Message.lease_id == lease_id
        )
    )
    return result.scalar_one() + 1


async def create_message(
    db: AsyncSession,
    lease_id: uuid.UUID,
    sender_id: uuid.UUID,
    sequence: int,
    message: str,
) -> Message:
    row = Message(
        lease_id=lease_id, sender_id=sender_id, sequence=sequence, message=message
    )
    db.add(row)
    await db.flush()
    return row


async def get_message(db: AsyncSession, message_id: uuid.UUID) -> Message | None:
    result = await db.execute(select(Message).where(Message.id == message_id))
    return result.scalar_one_or_none()


async def get_messages(
    db: AsyncSession, lease_id: uuid.UUID, after_sequence: int | None = None
) -> list[tuple[Message, Profile | None]]:
    """Messages of a lease oldest first, each with its sender's profile."""
    query = (
        select(Message, Profile)
        .outerjoin(Profile, Message.sender_id == Profile.id)
        .where(Message.lease_id == lease_id)
    )
    if after_sequence is not None:
        query = query.where(Message.sequence > after_sequence)
    result = await db.execute(query.order_by(Message.created_at, Message.sequence))
    return [(row.Message, row.Profile) for row in result.all()]


def _unread_query(user_id: uuid.UUID, lease_id: uuid.UUID | None = None):
    """Messages from others, in the user's leases, with no read marker."""
    read = select(MessageReadStatus.message_id).where(
        MessageReadStatus.user_id == user_id
    )
    query = (
        select(Message.id)
        .join(Lease, Message.lease_id == Lease.id)
        .where(
            or_(Lease.landlord_id == user_id, Lease.tenant_id == user_id),
            or_(Message.sender_id.is_(None), Message.sender_id != user_id),
            Message.id.not_in(read),
        )
    )
    if lease_id is not None:
        query = query.where(Message.lease_id == lease_id)
    return query


async def count_unread(
    db: AsyncSession, user_id: uuid.UUID, lease_id: uuid.UUID | None = None
) -> int:
    subquery = _unread_query(user_id, lease_id).subquery()
    result = await db.execute(select(func.count()).select_from(subquery))
    return result.scalar_one()


async def get_unread_ids(
    db: AsyncSession, user_id: uuid.UUID, lease_id: uuid.UUID
) -> list[uuid.UUID]:
    result = await db.execute(_unread_query(user_id, lease_id))
    return list(result.scalars().all())


async def get_read_status(
    db: AsyncSession, message_id: uuid.UUID, user_id: uuid.UUID
) -> MessageReadStatus | None:
    result = await db.execute(
        select(MessageReadStatus).where(
            and_(
                MessageReadStatus.message_id == message_id,
                MessageReadStatus.user_id == user_id,
            )
        )
    )
    return result.scalar_one_or_none()


async def add_read_statuses(
    db: AsyncSession, message_ids: list[uuid.UUID], user_id: uuid.UUID
) -> int:
    db.add_all(
        MessageReadStatus(message_id=message_id, user_id=user_id)
        for message_id in message_ids
    )
    await db.flush()
    return len(message_ids)
