"""Core infrastructure for the RentPilot backend."""

from .database_types import UUID
from .exceptions import (
    AuthenticationError,
    BusinessLogicError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    PermissionError,
    RentPilotException,
    ValidationError,
)

__all__ = [
    "UUID",
    "RentPilotException",
    "ValidationError",
    "BusinessLogicError",
    "ConflictError",
    "PermissionError",
    "DatabaseError",
    "AuthenticationError",
    "NotFoundError",
    "ExternalServiceError",
]
