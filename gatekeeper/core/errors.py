"""
Standardized error code catalog for Gatekeeper.

Caller-facing messages never name the credential check that failed.
"""
from enum import Enum
from typing import Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Authentication / authorization
    AUTH_UNAUTHORIZED = "AUTH_001"
    AUTH_FORBIDDEN = "AUTH_002"

    # Validation
    VAL_INVALID_INPUT = "VAL_001"
    VAL_ALREADY_EXISTS = "VAL_002"

    # Business logic
    BUS_RESOURCE_NOT_FOUND = "BUS_001"

    # System
    SYS_INTERNAL_ERROR = "SYS_001"
    SYS_DATABASE_ERROR = "SYS_002"


class ErrorMessages:
    """Centralized error message definitions."""

    _messages: Dict[ErrorCode, str] = {
        ErrorCode.AUTH_UNAUTHORIZED: "Authentication required",
        ErrorCode.AUTH_FORBIDDEN: "You don't have permission to perform this action",
        ErrorCode.VAL_INVALID_INPUT: "Invalid input provided",
        ErrorCode.VAL_ALREADY_EXISTS: "Resource already exists",
        ErrorCode.BUS_RESOURCE_NOT_FOUND: "Requested resource not found",
        ErrorCode.SYS_INTERNAL_ERROR: "An internal error occurred",
        ErrorCode.SYS_DATABASE_ERROR: "A database error occurred",
    }

    @classmethod
    def get(cls, code: ErrorCode, default: Optional[str] = None) -> str:
        """Get the default message for an error code."""
        return cls._messages.get(code, default or cls._messages[ErrorCode.SYS_INTERNAL_ERROR])
