"""Notification models for RentPilot."""

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.utils import utc_now
from ...database import Base, TimestampMixin, UUIDPrimaryKey, enum_column


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(str, enum.Enum):
    """Kinds of notifications written by the other flows."""

    LEASE_CREATED = "lease_created"
    LEASE_ACTIVATED = "lease_activated"
    LEASE_EXPIRED = "lease_expired"
    APPLICATION_SUBMITTED = "application_submitted"
    VACANCY = "vacancy"
    SYSTEM = "system"


class Notification(UUIDPrimaryKey, Base):
    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    priority: Mapped[NotificationPriority] = mapped_column(
        enum_column(NotificationPriority),
        nullable=False,
        default=NotificationPriority.MEDIUM,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    action_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type})>"


class NotificationPreference(TimestampMixin, Base):
    """Per-user alert toggles. Missing row means every toggle is on."""

    __tablename__ = "notification_preferences"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    app_alerts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    billing_alerts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lease_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    maintenance_alerts: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
