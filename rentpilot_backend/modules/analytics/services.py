"""Landlord portfolio analytics.

Every active lease counts as one occupied unit. Rent due is the sum of the
monthly rent of active leases, and a renewal is an active lease ending within
the renewal window.
"""

import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ..applications import crud as application_crud
from ..lease_management import crud as lease_crud
from ..lease_management.models import LeaseStatus
from ..property_management import crud as property_crud
from .schemas import PortfolioAnalytics, UpcomingRenewal

logger = logging.getLogger(__name__)

RENEWAL_WINDOW_DAYS = 60


async def get_portfolio_analytics(
    db: AsyncSession, landlord_id: uuid.UUID, today: date | None = None
) -> PortfolioAnalytics:
    today = today or date.today()

    total_units = await property_crud.count_units(db, landlord_id)
    active_leases = await lease_crud.get_leases(
        db, landlord_id=landlord_id, status=LeaseStatus.ACTIVE
    )
    occupied_units = len(active_leases)
    occupancy_rate = (
        round(occupied_units / total_units * 100, 1) if total_units > 0 else 0.0
    )
    total_rent_due = sum((lease.monthly_rent for lease in active_leases), Decimal("0"))

    renewals = [
        UpcomingRenewal(
            lease_id=lease.id,
            tenant_name=lease.tenant_name,
            property_title=title,
            lease_end_date=lease.lease_end_date,
            monthly_rent=lease.monthly_rent,
        )
        for lease, title in await lease_crud.get_active_leases_ending_between(
            db, landlord_id, today, today + timedelta(days=RENEWAL_WINDOW_DAYS)
        )
    ]
    new_applications = await application_crud.count_pending_for_landlord(
        db, landlord_id
    )

    logger.debug(
        "Portfolio analytics computed",
        extra={"landlord_id": str(landlord_id), "total_units": total_units},
    )
    return PortfolioAnalytics(
        total_units=total_units,
        occupied_units=occupied_units,
        occupancy_rate=occupancy_rate,
        total_rent_due=total_rent_due,
        new_applications=new_applications,
        upcoming_renewals=len(renewals),
        renewals=renewals,
    )
