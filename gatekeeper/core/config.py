"""
Application configuration management using Pydantic Settings.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Gatekeeper settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Gatekeeper"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production|test)$")
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./gatekeeper.db"
    DATABASE_ECHO: bool = False

    # Access keys
    ACCESS_KEY_PREFIX: str = "AK"
    SECRET_KEY_PREFIX: str = "SK"
    ACCESS_KEY_LENGTH: int = Field(default=32, ge=16, le=128)
    SECRET_KEY_LENGTH: int = Field(default=64, ge=32, le=256)
    ACCESS_KEY_MAX_AGE_DAYS: int = Field(default=90, gt=0, le=3650)

    # Credential transport
    ACCESS_KEY_HEADER: str = "x-access-key"
    SECRET_KEY_HEADER: str = "x-secret-key"

    # Authorization
    DEFAULT_PERMISSION_STRATEGY: str = Field(default="ALL", pattern="^(ALL|ANY)$")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
