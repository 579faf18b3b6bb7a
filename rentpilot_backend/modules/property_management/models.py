"""Property models for RentPilot.

A property belongs to one landlord. ``is_available`` is false while an
active lease references the property.
"""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...database import Base, TimestampMixin, UUIDPrimaryKey


class Property(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "properties"

    landlord_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    property_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    unit_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Address
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    province: Mapped[str] = mapped_column(String(120), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)

    # Listing details
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)
    square_feet: Mapped[int | None] = mapped_column(Integer, nullable=True)
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    available_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Object paths in the property photo bucket
    photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index("ix_properties_landlord", "landlord_id"),
        Index("ix_properties_available", "is_available"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title})>"
