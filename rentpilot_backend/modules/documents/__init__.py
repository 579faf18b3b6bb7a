"""Document storage for RentPilot."""

from .models import Document, DocumentCategory
from .routers import router

__all__ = ["Document", "DocumentCategory", "router"]
