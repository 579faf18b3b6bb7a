"""Lease models for RentPilot.

At most one lease per property may be ``active``. The rule is held by the
database: ``active_property_id`` mirrors ``property_id`` while the lease is
active and is NULL otherwise, and the column is unique. NULLs never collide,
so draft and expired leases are unconstrained on every backend.
"""

import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...core.database_types import UUID as UUID_DB
from ...database import Base, TimestampMixin, UUIDPrimaryKey, enum_column

ACTIVE_LEASE_CONSTRAINT = "uq_leases_active_property"


class LeaseStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"


class Lease(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "leases"

    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    tenant_name: Mapped[str] = mapped_column(Text, nullable=False)

    # Financial
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=0
    )
    pet_deposit: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)

    lease_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[LeaseStatus] = mapped_column(
        enum_column(LeaseStatus), nullable=False, default=LeaseStatus.DRAFT
    )

    # Terms
    utilities_included: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    special_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_pets: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    snow_grass_responsibility: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    reminder_settings: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    signature_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    active_property_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), nullable=True
    )

    # Relationships
    tenants: Mapped[list["LeaseTenant"]] = relationship(
        "LeaseTenant",
        back_populates="lease",
        cascade="all, delete-orphan",
        order_by="LeaseTenant.position",
    )

    __table_args__ = (
        UniqueConstraint("active_property_id", name=ACTIVE_LEASE_CONSTRAINT),
        Index("ix_leases_property_status", "property_id", "status"),
        Index("ix_leases_landlord", "landlord_id"),
        Index("ix_leases_tenant", "tenant_id"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == LeaseStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, property_id={self.property_id}, status={self.status})>"


class LeaseTenant(UUIDPrimaryKey, TimestampMixin, Base):
    """Contact record for one of the people named on a lease."""

    __tablename__ = "lease_tenants"

    lease_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False
    )
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tenant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tenant_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lease: Mapped["Lease"] = relationship("Lease", back_populates="tenants")

    __table_args__ = (Index("ix_lease_tenants_lease", "lease_id"),)

    def __repr__(self) -> str:
        return f"<LeaseTenant(lease_id={self.lease_id}, name={self.tenant_name})>"


@event.listens_for(Lease, "before_insert")
@event.listens_for(Lease, "before_update")
def sync_active_property(mapper, connection, target: Lease) -> None:
    """Keep the active-lease marker in step with status."""
    if target.status == LeaseStatus.ACTIVE:
        target.active_property_id = target.property_id
    else:
        target.active_property_id = None
