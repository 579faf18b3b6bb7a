"""Lease management module for RentPilot."""

from .models import Lease, LeaseStatus, LeaseTenant
from .routers import router

__all__ = ["Lease", "LeaseStatus", "LeaseTenant", "router"]
