"""Lease messaging models for RentPilot.

Messages are append-only. ``sequence`` is assigned per lease starting at 1
and is unique within the lease, so a reader can order messages that share
a timestamp and can detect gaps in what it has received.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.utils import utc_now
from ...database import Base, UUIDPrimaryKey


class Message(UUIDPrimaryKey, Base):
    __tablename__ = "messages"

    lease_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("lease_id", "sequence", name="uq_messages_lease_sequence"),
        Index("ix_messages_lease_created", "lease_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, lease_id={self.lease_id}, sequence={self.sequence})>"


class MessageReadStatus(UUIDPrimaryKey, Base):
    """Unread marker: a row means ``user_id`` has read ``message_id``."""

    __tablename__ = "message_read_status"

    message_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    read_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_read_status"),
        Index("ix_message_read_status_user", "user_id"),
    )
