"""Rental application schemas for RentPilot."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .models import ApplicationStatus


class ApplicationCreate(BaseModel):
    """The rental application form. ``consent`` must be given to submit."""

    property_id: UUID | None = None

    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=40)
    date_of_birth: date

    current_address: str = Field(..., min_length=1, max_length=255)
    current_city: str = Field(..., min_length=1, max_length=120)
    current_province: str = Field(..., min_length=1, max_length=120)
    current_postal_code: str = Field(..., min_length=1, max_length=20)
    move_in_date: date

    employment_status: str = Field(..., min_length=1, max_length=50)
    current_employer: str | None = Field(None, max_length=255)
    employment_length: str | None = Field(None, max_length=50)
    monthly_income: Decimal | None = Field(
        None, ge=0, max_digits=15, decimal_places=2
    )

    number_of_occupants: int = Field(1, ge=1)
    has_pets: bool = False
    pet_details: str | None = None
    has_been_evicted: bool = False

    emergency_contact_name: str = Field(..., min_length=1, max_length=255)
    emergency_contact_phone: str = Field(..., min_length=1, max_length=40)
    emergency_contact_relation: str = Field(..., min_length=1, max_length=50)
    reference_name: str | None = Field(None, max_length=255)
    reference_phone: str | None = Field(None, max_length=40)
    reference_relation: str | None = Field(None, max_length=50)

    additional_comments: str | None = None
    consent: bool = False


class ApplicationResponse(BaseModel):
    id: UUID
    property_id: UUID | None = None
    tenant_id: UUID
    status: ApplicationStatus
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: date
    current_address: str
    current_city: str
    current_province: str
    current_postal_code: str
    move_in_date: date
    employment_status: str
    current_employer: str | None = None
    employment_length: str | None = None
    monthly_income: Decimal | None = None
    number_of_occupants: int
    has_pets: bool
    pet_details: str | None = None
    has_been_evicted: bool
    emergency_contact_name: str
    emergency_contact_phone: str
    emergency_contact_relation: str
    reference_name: str | None = None
    reference_phone: str | None = None
    reference_relation: str | None = None
    additional_comments: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
