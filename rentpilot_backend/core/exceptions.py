"""
Custom exception classes for consistent error handling across all modules.
"""

from typing import Any


class RentPilotException(Exception):
    """Base exception for all RentPilot related errors."""

    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RentPilotException):
    """Raised when data validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            full_message = f"Validation error for field '{field}': {message}"
        else:
            full_message = message
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class BusinessLogicError(RentPilotException):
    """Raised when business logic constraints are violated."""

    status_code = 422


class ConflictError(BusinessLogicError):
    """Raised when a write collides with existing state (e.g. a unique constraint)."""

    status_code = 409


class PermissionError(RentPilotException):
    """Raised when user lacks permission to perform an action."""

    status_code = 403

    def __init__(
        self, action: str, resource_type: str, details: dict[str, Any] | None = None
    ):
        message = f"Permission denied: cannot {action} {resource_type}"
        super().__init__(message, details)
        self.action = action
        self.resource_type = resource_type


class DatabaseError(RentPilotException):
    """Raised when database operations fail."""

    status_code = 500


class AuthenticationError(RentPilotException):
    """Raised when authentication fails."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class NotFoundError(RentPilotException):
    """Raised when a resource is not found (simplified version)."""

    status_code = 404

    def __init__(
        self, message: str = "Resource not found", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details)


class ExternalServiceError(RentPilotException):
    """Raised when an external collaborator (e.g. object storage) fails."""

    status_code = 502

    def __init__(
        self,
        service_name: str,
        operation: str,
        details: dict[str, Any] | None = None,
    ):
        message = f"External service '{service_name}' failed during '{operation}'"
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation
