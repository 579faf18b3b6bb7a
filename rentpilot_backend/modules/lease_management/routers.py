"""Lease management API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from ...core.realtime import Hub
from ...database import DB
from ..auth.dependencies import CurrentUser, LandlordUser
from ..commons import BaseResponse
from . import services
from .models import LeaseStatus
from .schemas import LeaseCreate, LeaseCreatedResponse, LeaseResponse

router = APIRouter(prefix="/leases", tags=["Leases"])


@router.get("", response_model=BaseResponse[list[LeaseResponse]])
async def list_leases(
    current_user: CurrentUser,
    db: DB,
    status: LeaseStatus | None = Query(None),
    property_id: UUID | None = Query(None),
):
    """Landlords see leases they created; tenants see leases linked to them."""
    leases = await services.list_leases(
        db, current_user, status=status, property_id=property_id
    )
    return BaseResponse(
        success=True, data=[LeaseResponse.model_validate(lease) for lease in leases]
    )


@router.post(
    "",
    response_model=BaseResponse[LeaseCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_lease(data: LeaseCreate, current_user: LandlordUser, db: DB, hub: Hub):
    lease = await services.create_lease(db, current_user, data, hub=hub)
    return BaseResponse(
        success=True,
        message="Lease created successfully",
        data=LeaseCreatedResponse(
            lease_id=lease.id, lease=LeaseResponse.model_validate(lease)
        ),
    )


@router.get("/{lease_id}", response_model=BaseResponse[LeaseResponse])
async def get_lease(lease_id: UUID, current_user: CurrentUser, db: DB):
    lease = await services.get_lease_for_participant(db, lease_id, current_user)
    return BaseResponse(success=True, data=LeaseResponse.model_validate(lease))


@router.post("/{lease_id}/activate", response_model=BaseResponse[LeaseResponse])
async def activate_lease(
    lease_id: UUID, current_user: LandlordUser, db: DB, hub: Hub
):
    lease = await services.activate_lease(db, lease_id, current_user.id, hub=hub)
    return BaseResponse(
        success=True,
        message="Lease activated",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/expire", response_model=BaseResponse[LeaseResponse])
async def expire_lease(lease_id: UUID, current_user: LandlordUser, db: DB, hub: Hub):
    lease = await services.expire_lease(db, lease_id, current_user.id, hub=hub)
    return BaseResponse(
        success=True,
        message="Lease expired",
        data=LeaseResponse.model_validate(lease),
    )


@router.delete("/{lease_id}", response_model=BaseResponse[None])
async def delete_lease(lease_id: UUID, current_user: LandlordUser, db: DB):
    await services.delete_lease(db, lease_id, current_user.id)
    return BaseResponse(success=True, message="Lease deleted")
