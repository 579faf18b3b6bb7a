"""Authentication models for RentPilot.

A Profile is the signed-in identity: credentials, contact details and the
role chosen at sign-up. The role never changes after creation.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.utils import as_utc, display_name, utc_now
from ...database import Base, TimestampMixin, UUIDPrimaryKey, enum_column


class UserRole(str, enum.Enum):
    """Roles a profile can be created with."""

    LANDLORD = "landlord"
    TENANT = "tenant"


class Profile(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    role: Mapped[UserRole] = mapped_column(enum_column(UserRole), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def full_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.email)

    @property
    def is_locked(self) -> bool:
        locked_until = as_utc(self.locked_until)
        return locked_until is not None and locked_until > utc_now()

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"


class RefreshToken(Base):
    """Refresh tokens for JWT authentication. Only the SHA-256 hash is stored."""

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    __table_args__ = (Index("ix_refresh_tokens_user", "user_id"),)

    @property
    def is_expired(self) -> bool:
        return utc_now() > as_utc(self.expires_at)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id})>"
