"""
Object storage backend for uploaded files.

Objects live under ``{root}/{bucket}/{path}``. Documents and property photos
are separate buckets. Access URLs are short-lived JWTs naming the bucket and
path, verified by each bucket's download endpoint.
"""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Annotated
from urllib.parse import quote

import aiofiles
import aiofiles.os
import jwt
from fastapi import Depends
from starlette.requests import HTTPConnection

from ..config import settings
from .exceptions import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

DOWNLOAD_TOKEN_TYPE = "download"
DOWNLOAD_PATH = "/api/documents/download"
PHOTO_DOWNLOAD_PATH = "/api/properties/photos/download"


class StorageBackend(ABC):
    """Minimal object storage contract used by the document and photo services."""

    bucket: str
    download_path: str = DOWNLOAD_PATH

    @abstractmethod
    def for_bucket(self, bucket: str, download_path: str) -> "StorageBackend":
        """A backend on the same store scoped to another bucket."""

    @abstractmethod
    async def upload(self, path: str, data: bytes) -> None:
        """Store ``data`` at ``path``. Raises ExternalServiceError on failure."""

    @abstractmethod
    async def remove(self, paths: list[str]) -> None:
        """Delete objects. Raises ExternalServiceError on failure."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Whether an object is stored at ``path``."""

    @abstractmethod
    def local_path(self, path: str) -> Path:
        """Filesystem location of an object (for streaming responses)."""

    async def create_signed_url(self, path: str, expires_in: int) -> str | None:
        """Return a time-limited download URL, or None if the object is missing."""
        if not await self.exists(path):
            return None
        token = create_download_token(self.bucket, path, expires_in)
        return f"{self.download_path}?token={quote(token)}"


class LocalFileStorage(StorageBackend):
    """Stores objects on the local filesystem with aiofiles."""

    def __init__(
        self,
        root: str | os.PathLike,
        bucket: str = "documents",
        download_path: str = DOWNLOAD_PATH,
    ):
        self.root = Path(root)
        self.bucket = bucket
        self.download_path = download_path

    def for_bucket(self, bucket: str, download_path: str) -> "LocalFileStorage":
        return LocalFileStorage(self.root, bucket, download_path)

    def local_path(self, path: str) -> Path:
        bucket_root = (self.root / self.bucket).resolve()
        target = (bucket_root / path).resolve()
        if bucket_root not in target.parents:
            raise ValidationError("Invalid storage path", field="path", value=path)
        return target

    async def upload(self, path: str, data: bytes) -> None:
        target = self.local_path(path)
        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(target, "wb") as out_file:
                await out_file.write(data)
        except OSError as e:
            logger.error(
                "Storage upload failed",
                extra={"bucket": self.bucket, "path": path, "error": str(e)},
            )
            raise ExternalServiceError(
                "storage", "upload", details={"path": path, "error": str(e)}
            ) from e

    async def remove(self, paths: list[str]) -> None:
        for path in paths:
            target = self.local_path(path)
            try:
                await aiofiles.os.remove(target)
            except FileNotFoundError:
                logger.warning(
                    "Storage object already gone",
                    extra={"bucket": self.bucket, "path": path},
                )
            except OSError as e:
                logger.error(
                    "Storage remove failed",
                    extra={"bucket": self.bucket, "path": path, "error": str(e)},
                )
                raise ExternalServiceError(
                    "storage", "remove", details={"path": path, "error": str(e)}
                ) from e

    async def exists(self, path: str) -> bool:
        try:
            return await aiofiles.os.path.isfile(self.local_path(path))
        except ValidationError:
            return False


def create_download_token(bucket: str, path: str, expires_in: int) -> str:
    """Sign a download grant for one object."""
    now = datetime.now(timezone.utc)
    payload = {
        "bucket": bucket,
        "path": path,
        "type": DOWNLOAD_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_download_token(token: str) -> tuple[str, str] | None:
    """Validate a download grant.

    Returns:
        (bucket, path) if the token is valid, None if invalid or expired.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != DOWNLOAD_TOKEN_TYPE:
        return None
    return payload.get("bucket"), payload.get("path")


def build_storage() -> StorageBackend:
    """Storage backend configured from settings."""
    return LocalFileStorage(settings.storage_root, settings.storage_bucket)


def get_storage(connection: HTTPConnection) -> StorageBackend:
    return connection.app.state.storage


Storage = Annotated[StorageBackend, Depends(get_storage)]


def get_photo_storage(connection: HTTPConnection) -> StorageBackend:
    """The property photo bucket, on the same store as documents."""
    return get_storage(connection).for_bucket(
        settings.property_photo_bucket, PHOTO_DOWNLOAD_PATH
    )


PhotoStorage = Annotated[StorageBackend, Depends(get_photo_storage)]
