"""Response envelopes shared across all modules."""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel, Generic[T]):
    """Envelope for every JSON response."""

    success: bool = Field(default=True, description="Whether the request was successful")
    message: str | None = Field(default=None, description="Response message")
    data: T | None = Field(default=None, description="Response data")
    error: Any | None = Field(default=None, description="Error details if any")
    timestamp: datetime = Field(default_factory=_now, description="Response timestamp")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    total: int = Field(default=0, description="Total number of items")
    page: int = Field(default=1)
    page_size: int = Field(default=20)
    total_pages: int = Field(default=0)

    @classmethod
    def from_items(cls, items: list[T], total: int, page: int, page_size: int):
        total_pages = (total + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
        )
