"""Lease schemas for RentPilot."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from .models import LeaseStatus


class TenantEntry(BaseModel):
    """One person named on the lease form. Blank names are dropped."""

    tenant_name: str = Field("", max_length=255)
    tenant_email: str | None = Field(None, max_length=255)
    tenant_phone: str | None = Field(None, max_length=40)


class ReminderSettings(BaseModel):
    rent_due_day: int = Field(1, ge=1, le=31)
    rent_reminder_days: int = Field(3, ge=0, le=31)
    renewal_reminder_days: int = Field(60, ge=0, le=365)
    email_notifications: bool = True
    sms_notifications: bool = False
    emergency_contact: str | None = Field(None, max_length=255)
    sublet_allowed: bool = False


class LeaseCreate(BaseModel):
    """Lease form payload.

    Required-field checks (property, tenant names, dates, signature) happen in
    the service so that they are reported uniformly and before any query.
    """

    property_id: UUID | None = None
    tenant_id: UUID | None = None
    tenants: list[TenantEntry] = Field(default_factory=list)
    lease_start_date: date | None = None
    lease_end_date: date | None = None
    monthly_rent: Decimal | None = Field(None, ge=0, max_digits=15, decimal_places=2)
    security_deposit: Decimal = Field(
        Decimal("0"), ge=0, max_digits=15, decimal_places=2
    )
    pet_deposit: Decimal | None = Field(None, ge=0, max_digits=15, decimal_places=2)
    has_pets: bool = False
    utilities_included: list[str] = Field(default_factory=list)
    snow_grass_responsibility: str | None = Field(None, max_length=50)
    special_terms: str | None = None
    reminder_settings: ReminderSettings | None = None
    status: LeaseStatus = LeaseStatus.ACTIVE
    require_signature: bool = False
    signature_name: str | None = Field(None, max_length=255)


class LeaseTenantResponse(BaseModel):
    id: UUID
    tenant_name: str
    tenant_email: str | None = None
    tenant_phone: str | None = None
    is_primary: bool

    class Config:
        from_attributes = True


class LeaseResponse(BaseModel):
    id: UUID
    property_id: UUID
    landlord_id: UUID
    tenant_id: UUID | None = None
    tenant_name: str
    monthly_rent: Decimal
    security_deposit: Decimal
    pet_deposit: Decimal | None = None
    lease_start_date: date
    lease_end_date: date
    status: LeaseStatus
    utilities_included: list[str] = Field(default_factory=list)
    special_terms: str | None = None
    has_pets: bool
    snow_grass_responsibility: str | None = None
    reminder_settings: dict | None = None
    signature_name: str | None = None
    tenants: list[LeaseTenantResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeaseCreatedResponse(BaseModel):
    lease_id: UUID
    lease: LeaseResponse
