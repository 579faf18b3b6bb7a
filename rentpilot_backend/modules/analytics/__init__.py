"""Landlord portfolio analytics for RentPilot."""

from .routers import router

__all__ = ["router"]
