"""Property management module for RentPilot."""

from .models import Property
from .routers import router

__all__ = ["Property", "router"]
