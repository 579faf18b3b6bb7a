"""Portfolio analytics API routes."""

from fastapi import APIRouter

from ...database import DB
from ..auth.dependencies import LandlordUser
from ..commons import BaseResponse
from . import services
from .schemas import PortfolioAnalytics

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/portfolio", response_model=BaseResponse[PortfolioAnalytics])
async def portfolio_analytics(current_user: LandlordUser, db: DB):
    """Occupancy, rent due, upcoming renewals and pending applications."""
    analytics = await services.get_portfolio_analytics(db, current_user.id)
    return BaseResponse(success=True, data=analytics)
