"""Portfolio analytics schemas for RentPilot."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class UpcomingRenewal(BaseModel):
    lease_id: UUID
    tenant_name: str
    property_title: str
    lease_end_date: date
    monthly_rent: Decimal


class PortfolioAnalytics(BaseModel):
    total_units: int
    occupied_units: int
    occupancy_rate: float = Field(..., description="Occupied units as a percentage")
    total_rent_due: Decimal
    new_applications: int
    upcoming_renewals: int
    renewals: list[UpcomingRenewal] = Field(default_factory=list)
