"""Rental application model for RentPilot."""

import enum
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...database import Base, TimestampMixin, UUIDPrimaryKey, enum_column


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Application(UUIDPrimaryKey, TimestampMixin, Base):
    """A tenant's application to rent a property. Created once per submission."""

    __tablename__ = "applications"

    property_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        enum_column(ApplicationStatus),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    # Applicant
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)

    # Current residence
    current_address: Mapped[str] = mapped_column(String(255), nullable=False)
    current_city: Mapped[str] = mapped_column(String(120), nullable=False)
    current_province: Mapped[str] = mapped_column(String(120), nullable=False)
    current_postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    move_in_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Employment
    employment_status: Mapped[str] = mapped_column(String(50), nullable=False)
    current_employer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employment_length: Mapped[str | None] = mapped_column(String(50), nullable=True)
    monthly_income: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )

    # Household
    number_of_occupants: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    has_pets: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pet_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_been_evicted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # Contacts
    emergency_contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    emergency_contact_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    emergency_contact_relation: Mapped[str] = mapped_column(String(50), nullable=False)
    reference_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reference_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    reference_relation: Mapped[str | None] = mapped_column(String(50), nullable=True)

    additional_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_applications_tenant", "tenant_id"),
        Index("ix_applications_property", "property_id"),
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, tenant_id={self.tenant_id}, status={self.status})>"
