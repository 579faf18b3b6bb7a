"""Rental application intake for RentPilot."""

from .models import Application, ApplicationStatus
from .routers import router

__all__ = ["Application", "ApplicationStatus", "router"]
