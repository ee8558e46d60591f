"""
Custom exceptions for Gatekeeper.
"""
from typing import Any, Dict, Optional

from gatekeeper.core.errors import ErrorCode, ErrorMessages


class GatekeeperException(Exception):
    """Base exception for all Gatekeeper exceptions."""

    error_code: ErrorCode = ErrorCode.SYS_INTERNAL_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or ErrorMessages.get(self.error_code)
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(GatekeeperException):
    """Malformed arguments supplied by the caller."""

    error_code = ErrorCode.VAL_INVALID_INPUT
    status_code = 422

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


class AlreadyExistsError(InvalidInputError):
    """A uniquely named resource already exists."""

    error_code = ErrorCode.VAL_ALREADY_EXISTS
    status_code = 409


class NotFoundError(GatekeeperException):
    """Referenced user, role or key is absent."""

    error_code = ErrorCode.BUS_RESOURCE_NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details={"resource": resource, "resource_id": str(resource_id)})
        self.resource = resource
        self.resource_id = resource_id


class UnauthorizedError(GatekeeperException):
    """Identity could not be established."""

    error_code = ErrorCode.AUTH_UNAUTHORIZED
    status_code = 401


class ForbiddenError(GatekeeperException):
    """Identity established but lacking the required rights."""

    error_code = ErrorCode.AUTH_FORBIDDEN
    status_code = 403


class DatabaseError(GatekeeperException):
    """Persistence collaborator failure."""

    error_code = ErrorCode.SYS_DATABASE_ERROR
    status_code = 503

    def __init__(self, message: Optional[str] = None, operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message, details=details)
