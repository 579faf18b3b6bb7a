"""Document API routes."""

from uuid import UUID

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from ...config import settings
from ...core.exceptions import AuthenticationError, NotFoundError
from ...core.storage import Storage, decode_download_token
from ...database import DB
from ..auth.dependencies import CurrentUser
from ..commons import BaseResponse
from . import crud, services
from .models import DocumentCategory
from .schemas import DocumentResponse, DocumentUpdate, DocumentUrl, StorageUsage

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "",
    response_model=BaseResponse[DocumentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    current_user: CurrentUser,
    db: DB,
    storage: Storage,
    file: UploadFile = File(...),
    category: DocumentCategory = Form(DocumentCategory.OTHER),
    property_id: UUID | None = Form(None),
    name: str | None = Form(None),
):
    # One byte past the ceiling is enough to reject the upload
    data = await file.read(settings.document_max_upload_bytes + 1)
    document = await services.upload_document(
        db,
        storage,
        current_user.id,
        filename=file.filename or "upload",
        data=data,
        content_type=file.content_type,
        category=category,
        property_id=property_id,
        name=name,
    )
    return BaseResponse(
        success=True,
        message="Document uploaded successfully",
        data=DocumentResponse.model_validate(document),
    )


@router.get("", response_model=BaseResponse[list[DocumentResponse]])
async def list_documents(
    current_user: CurrentUser,
    db: DB,
    category: DocumentCategory | None = Query(None),
    property_id: UUID | None = Query(None),
):
    documents = await services.list_documents(
        db, current_user.id, category=category, property_id=property_id
    )
    return BaseResponse(
        success=True, data=[DocumentResponse.model_validate(d) for d in documents]
    )


@router.get("/usage", response_model=BaseResponse[StorageUsage])
async def storage_usage(current_user: CurrentUser, db: DB):
    usage = await services.storage_usage(db, current_user.id)
    return BaseResponse(success=True, data=usage)


@router.get("/download")
async def download_document(token: str, db: DB, storage: Storage):
    """Serve an object named by a signed download token."""
    grant = decode_download_token(token)
    if grant is None:
        raise AuthenticationError("Invalid or expired download link")
    bucket, path = grant
    if bucket != storage.bucket or not await storage.exists(path):
        raise NotFoundError("File not found")

    document = await crud.get_document_by_path(db, path)
    if document is None:
        raise NotFoundError("File not found")
    return FileResponse(
        storage.local_path(path),
        media_type=document.mime_type,
        filename=document.original_name,
    )


@router.put("/{document_id}", response_model=BaseResponse[DocumentResponse])
async def update_document(
    document_id: UUID, data: DocumentUpdate, current_user: CurrentUser, db: DB
):
    document = await services.update_document(db, document_id, current_user.id, data)
    return BaseResponse(success=True, data=DocumentResponse.model_validate(document))


@router.get("/{document_id}/url", response_model=BaseResponse[DocumentUrl])
async def get_document_url(
    document_id: UUID, current_user: CurrentUser, db: DB, storage: Storage
):
    url = await services.get_document_url(db, storage, document_id, current_user.id)
    if url is None:
        raise NotFoundError("File is not available")
    return BaseResponse(
        success=True,
        data=DocumentUrl(url=url, expires_in=settings.signed_url_expire_seconds),
    )


@router.delete("/{document_id}", response_model=BaseResponse[None])
async def delete_document(
    document_id: UUID, current_user: CurrentUser, db: DB, storage: Storage
):
    removed = await services.delete_document(db, storage, document_id, current_user.id)
    if not removed:
        return BaseResponse(
            success=True,
            message="Document deleted",
            error="Stored file could not be removed",
        )
    return BaseResponse(success=True, message="Document deleted")
