"""
Tests for settings, errors and logging setup.
"""
import pytest
from pydantic import ValidationError

from gatekeeper.core.config import Settings
from gatekeeper.core.errors import ErrorCode
from gatekeeper.core.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    ForbiddenError,
    GatekeeperException,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from gatekeeper.core.logging import get_logger, log_error_details, setup_logging


class TestSettings:
    """Test configuration loading."""

    def test_defaults(self, settings):
        assert settings.ACCESS_KEY_PREFIX == "AK"
        assert settings.SECRET_KEY_PREFIX == "SK"
        assert settings.ACCESS_KEY_LENGTH == 32
        assert settings.SECRET_KEY_LENGTH == 64
        assert settings.ACCESS_KEY_MAX_AGE_DAYS == 90
        assert settings.DEFAULT_PERMISSION_STRATEGY == "ALL"
        assert settings.is_production is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ACCESS_KEY_MAX_AGE_DAYS", "30")
        monkeypatch.setenv("ACCESS_KEY_HEADER", "x-api-key")

        settings = Settings(_env_file=None)

        assert settings.ACCESS_KEY_MAX_AGE_DAYS == 30
        assert settings.ACCESS_KEY_HEADER == "x-api-key"

    @pytest.mark.parametrize("field,value", [
        ("ENVIRONMENT", "qa"),
        ("DEFAULT_PERMISSION_STRATEGY", "SOME"),
        ("ACCESS_KEY_MAX_AGE_DAYS", 0),
        ("ACCESS_KEY_MAX_AGE_DAYS", 3651),
        ("ACCESS_KEY_LENGTH", 8),
        ("SECRET_KEY_LENGTH", 16),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})


class TestExceptions:
    """Test the error hierarchy."""

    @pytest.mark.parametrize("error,status_code,code", [
        (InvalidInputError("bad", field="name"), 422, ErrorCode.VAL_INVALID_INPUT),
        (AlreadyExistsError("dup"), 409, ErrorCode.VAL_ALREADY_EXISTS),
        (NotFoundError("Role", "admin"), 404, ErrorCode.BUS_RESOURCE_NOT_FOUND),
        (UnauthorizedError(), 401, ErrorCode.AUTH_UNAUTHORIZED),
        (ForbiddenError(), 403, ErrorCode.AUTH_FORBIDDEN),
        (DatabaseError(operation="upsert_role"), 503, ErrorCode.SYS_DATABASE_ERROR),
    ])
    def test_status_and_code(self, error, status_code, code):
        assert isinstance(error, GatekeeperException)
        assert error.status_code == status_code
        assert error.error_code is code

    def test_already_exists_is_invalid_input(self):
        assert isinstance(AlreadyExistsError("dup"), InvalidInputError)

    def test_to_dict(self):
        error = NotFoundError("Role", "admin")

        assert error.to_dict() == {
            "code": "BUS_001",
            "message": "Role with ID admin not found",
            "details": {"resource": "Role", "resource_id": "admin"},
        }

    def test_default_message(self):
        assert UnauthorizedError().message == "Authentication required"


class TestLogging:
    """Test logging helpers."""

    def test_setup_logging(self, settings):
        setup_logging(settings)
        get_logger(__name__).info("logging_configured", environment=settings.ENVIRONMENT)

    def test_log_error_details(self):
        context = log_error_details(ValueError("boom"), user_id="u1", operation="x")

        assert context == {
            "error_type": "ValueError",
            "error_message": "boom",
            "operation": "x",
            "user_id": "u1",
        }
