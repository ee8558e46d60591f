"""
Domain schemas for Gatekeeper.
"""

from .access_key import AccessKey, AccessKeyOptions, IssuedAccessKey
from .rbac import (
    AuthorizationMode,
    Permission,
    PermissionStrategy,
    Role,
    User,
    UserRoleInfo,
    parse_permissions,
)

__all__ = [
    # RBAC schemas
    "AuthorizationMode",
    "Permission",
    "PermissionStrategy",
    "Role",
    "User",
    "UserRoleInfo",
    "parse_permissions",

    # Access key schemas
    "AccessKey",
    "AccessKeyOptions",
    "IssuedAccessKey",
]
