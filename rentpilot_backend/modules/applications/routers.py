"""Rental application API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from ...core.realtime import Hub
from ...database import DB
from ..auth.dependencies import LandlordUser, TenantUser
from ..commons import BaseResponse
from . import services
from .schemas import ApplicationCreate, ApplicationResponse

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post(
    "",
    response_model=BaseResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    data: ApplicationCreate, current_user: TenantUser, db: DB, hub: Hub
):
    application = await services.submit_application(db, current_user, data, hub=hub)
    return BaseResponse(
        success=True,
        message="Application submitted successfully",
        data=ApplicationResponse.model_validate(application),
    )


@router.get("/mine", response_model=BaseResponse[list[ApplicationResponse]])
async def list_my_applications(current_user: TenantUser, db: DB):
    applications = await services.list_for_tenant(db, current_user.id)
    return BaseResponse(
        success=True,
        data=[ApplicationResponse.model_validate(a) for a in applications],
    )


@router.get("/received", response_model=BaseResponse[list[ApplicationResponse]])
async def list_received_applications(
    current_user: LandlordUser, db: DB, property_id: UUID | None = Query(None)
):
    """Applications made against the caller's properties."""
    applications = await services.list_for_landlord(
        db, current_user.id, property_id=property_id
    )
    return BaseResponse(
        success=True,
        data=[ApplicationResponse.model_validate(a) for a in applications],
    )
