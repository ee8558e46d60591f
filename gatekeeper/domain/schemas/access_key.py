"""
Access key schemas.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.core.clock import ensure_utc
from gatekeeper.core.config import get_settings


class AccessKeyOptions(BaseModel):
    """Issuance options; defaults come from settings."""
    model_config = ConfigDict(extra="forbid")

    max_age_days: int = Field(
        default_factory=lambda: get_settings().ACCESS_KEY_MAX_AGE_DAYS,
        gt=0,
        le=3650,
    )
    name: Optional[str] = Field(None, max_length=100)
    access_key_length: int = Field(
        default_factory=lambda: get_settings().ACCESS_KEY_LENGTH,
        ge=16,
        le=128,
    )
    secret_key_length: int = Field(
        default_factory=lambda: get_settings().SECRET_KEY_LENGTH,
        ge=32,
        le=256,
    )


class AccessKey(BaseModel):
    """Stored access key. Only the secret's digest is kept."""
    model_config = ConfigDict(from_attributes=True)

    access_key_id: str = Field(..., min_length=1)
    secret_hash: str = Field(..., repr=False)
    owner_user_id: UUID
    name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    max_age_days: int = Field(default=90, gt=0)
    active: bool = True

    @property
    def expires_at(self) -> datetime:
        """Moment the key stops authenticating."""
        return ensure_utc(self.created_at) + timedelta(days=self.max_age_days)


class IssuedAccessKey(BaseModel):
    """Issuance result. The plaintext secret is only ever returned here."""
    access_key_id: str
    secret_key: str = Field(..., repr=False)
    owner_user_id: UUID
    name: Optional[str] = None
    expires_at: datetime
