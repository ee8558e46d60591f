"""
Role, user and permission schemas.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, FrozenSet, Iterable, List, Optional, Set, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from gatekeeper.core.exceptions import InvalidInputError

# Conventionally ``resource.action``, e.g. ``user.create``.
Permission = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class PermissionStrategy(str, Enum):
    """Combinator for a list of required permissions."""
    ALL = "ALL"
    ANY = "ANY"


class AuthorizationMode(str, Enum):
    """How identity-resolution failures are treated."""
    REQUIRED = "required"
    OPTIONAL = "optional"


def parse_permissions(permissions: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    """
    Normalize permission input into a deduplicated set.

    Accepts a single permission string or any iterable of strings.

    Raises:
        InvalidInputError: On a non-string or blank permission
    """
    if permissions is None:
        return frozenset()
    if isinstance(permissions, str):
        permissions = [permissions]

    normalized = set()
    for permission in permissions:
        if not isinstance(permission, str) or not permission.strip():
            raise InvalidInputError(
                f"Invalid permission identifier: {permission!r}",
                field="permissions",
            )
        normalized.add(permission.strip())
    return frozenset(normalized)


class User(BaseModel):
    """User with a single primary role reference."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    email: Optional[str] = None
    role_id: Optional[UUID] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Role(BaseModel):
    """Named role carrying a permission set."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Set[Permission] = Field(default_factory=set)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("role name must not be blank")
        return v

    def has_permission(self, permission: str) -> bool:
        """Check if role has specific permission."""
        return permission in self.permissions


class UserRoleInfo(BaseModel):
    """A user's role and the permissions it grants."""
    user_id: UUID
    role_id: UUID
    role_name: str
    permissions: List[str] = Field(default_factory=list)
