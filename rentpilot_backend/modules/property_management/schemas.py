"""Property schemas for RentPilot."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    property_type: str | None = Field(None, max_length=50)
    unit_count: int | None = Field(None, ge=1)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    province: str = Field(..., min_length=1, max_length=120)
    postal_code: str = Field(..., min_length=1, max_length=20)
    monthly_rent: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: Decimal | None = Field(None, ge=0, max_digits=4, decimal_places=1)
    square_feet: int | None = Field(None, ge=0)
    amenities: list[str] = Field(default_factory=list)
    available_date: date | None = None

    @field_validator("amenities")
    @classmethod
    def strip_amenities(cls, v: list[str]) -> list[str]:
        return [a.strip() for a in v if a and a.strip()]


class PropertyCreate(PropertyBase):
    is_available: bool = True


class PropertyUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    property_type: str | None = Field(None, max_length=50)
    unit_count: int | None = Field(None, ge=1)
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    province: str | None = Field(None, min_length=1, max_length=120)
    postal_code: str | None = Field(None, min_length=1, max_length=20)
    monthly_rent: Decimal | None = Field(None, gt=0, max_digits=15, decimal_places=2)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: Decimal | None = Field(None, ge=0, max_digits=4, decimal_places=1)
    square_feet: int | None = Field(None, ge=0)
    amenities: list[str] | None = None
    available_date: date | None = None
    is_available: bool | None = None


class PropertyResponse(PropertyBase):
    id: UUID
    landlord_id: UUID
    is_available: bool
    photos: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertyPhoto(BaseModel):
    path: str
    url: str
    expires_in: int
