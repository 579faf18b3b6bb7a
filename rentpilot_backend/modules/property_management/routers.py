"""Property management API routes."""

from uuid import UUID

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import FileResponse

from ...config import settings
from ...core.exceptions import AuthenticationError, NotFoundError
from ...core.realtime import Hub
from ...core.storage import PhotoStorage, decode_download_token
from ...database import DB
from ..auth.dependencies import CurrentUser, LandlordUser
from ..commons import BaseResponse, PaginatedResponse
from . import crud, services
from .schemas import PropertyCreate, PropertyPhoto, PropertyResponse, PropertyUpdate

router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get("", response_model=BaseResponse[PaginatedResponse[PropertyResponse]])
async def list_properties(
    current_user: LandlordUser,
    db: DB,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    is_available: bool | None = Query(None),
    search: str | None = Query(None),
):
    """The caller's own properties."""
    skip = (page - 1) * page_size
    properties, total = await crud.get_properties(
        db=db,
        landlord_id=current_user.id,
        skip=skip,
        limit=page_size,
        is_available=is_available,
        search=search,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PropertyResponse.model_validate(p) for p in properties],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )


@router.get(
    "/available", response_model=BaseResponse[PaginatedResponse[PropertyResponse]]
)
async def list_available_properties(
    current_user: CurrentUser,
    db: DB,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: str | None = Query(None),
):
    """Listings open for applications, across all landlords."""
    skip = (page - 1) * page_size
    properties, total = await crud.get_properties(
        db=db, skip=skip, limit=page_size, is_available=True, search=search
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PropertyResponse.model_validate(p) for p in properties],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )


@router.get("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def get_property(property_id: UUID, current_user: CurrentUser, db: DB):
    property_obj = await services.get_visible_property(db, property_id, current_user)
    return BaseResponse(success=True, data=PropertyResponse.model_validate(property_obj))


@router.post(
    "",
    response_model=BaseResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_property(
    data: PropertyCreate, current_user: LandlordUser, db: DB, hub: Hub
):
    property_obj = await services.create_property(db, current_user.id, data, hub=hub)
    return BaseResponse(
        success=True,
        message="Property created successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.put("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def update_property(
    property_id: UUID, data: PropertyUpdate, current_user: LandlordUser, db: DB
):
    property_obj = await services.update_property(db, property_id, current_user.id, data)
    return BaseResponse(
        success=True,
        message="Property updated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.delete("/{property_id}", response_model=BaseResponse[None])
async def delete_property(property_id: UUID, current_user: LandlordUser, db: DB):
    await services.delete_property(db, property_id, current_user.id)
    return BaseResponse(success=True, message="Property deleted successfully")


@router.get("/photos/download")
async def download_photo(token: str, storage: PhotoStorage):
    """Serve a property photo named by a signed download token."""
    grant = decode_download_token(token)
    if grant is None:
        raise AuthenticationError("Invalid or expired download link")
    bucket, path = grant
    if bucket != storage.bucket or not await storage.exists(path):
        raise NotFoundError("Photo not found")
    return FileResponse(storage.local_path(path))


@router.post(
    "/{property_id}/photos",
    response_model=BaseResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_photos(
    property_id: UUID,
    current_user: LandlordUser,
    db: DB,
    storage: PhotoStorage,
    photos: list[UploadFile] = File(...),
):
    files = [
        services.PhotoFile(
            filename=photo.filename or "photo",
            # One byte past the ceiling is enough to reject the photo
            data=await photo.read(settings.photo_max_upload_bytes + 1),
            content_type=photo.content_type,
        )
        for photo in photos
    ]
    property_obj = await services.upload_property_photos(
        db, storage, property_id, current_user.id, files
    )
    return BaseResponse(
        success=True,
        message="Photos uploaded successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.get("/{property_id}/photos", response_model=BaseResponse[list[PropertyPhoto]])
async def list_photos(
    property_id: UUID, current_user: CurrentUser, db: DB, storage: PhotoStorage
):
    photos = await services.list_property_photos(db, storage, property_id, current_user)
    return BaseResponse(success=True, data=photos)
