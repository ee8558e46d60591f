"""
Gatekeeper: role-based access control with access-key authentication.
"""

from gatekeeper.core.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    ForbiddenError,
    GatekeeperException,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import (
    AccessKey,
    AccessKeyOptions,
    AuthorizationMode,
    IssuedAccessKey,
    PermissionStrategy,
    Role,
    User,
    UserRoleInfo,
)
from gatekeeper.infrastructure.memory import InMemoryStore
from gatekeeper.services.auth import (
    AccessKeyManager,
    AuthorizationDecider,
    AuthorizationResult,
    Credentials,
    Identity,
    KeyCodec,
    PermissionEngine,
    RoleStore,
)

__version__ = "0.1.0"

__all__ = [
    # Services
    "AccessKeyManager",
    "AuthorizationDecider",
    "KeyCodec",
    "PermissionEngine",
    "RoleStore",

    # Persistence
    "IRBACStore",
    "InMemoryStore",

    # Models
    "AccessKey",
    "AccessKeyOptions",
    "AuthorizationMode",
    "AuthorizationResult",
    "Credentials",
    "Identity",
    "IssuedAccessKey",
    "PermissionStrategy",
    "Role",
    "User",
    "UserRoleInfo",

    # Errors
    "AlreadyExistsError",
    "DatabaseError",
    "ForbiddenError",
    "GatekeeperException",
    "InvalidInputError",
    "NotFoundError",
    "UnauthorizedError",
]
