"""
Authorization and RBAC system for Gatekeeper.

This module provides role-based access control with flat ``resource.action``
permissions, access-key/secret-key credentials for programmatic access, and
the decision logic that gates protected operations.
"""

from .access_keys import AccessKeyManager
from .authorization import (
    AuthMethod,
    AuthorizationDecider,
    AuthorizationResult,
    Credentials,
    DecisionState,
    DenialKind,
    Identity,
    parse_mode,
)
from .key_codec import KEY_ALPHABET, KeyCodec
from .permissions import PermissionEngine, parse_strategy
from .rbac import RoleStore

__all__ = [
    # Core services
    "AccessKeyManager",
    "AuthorizationDecider",
    "KeyCodec",
    "PermissionEngine",
    "RoleStore",

    # Decision models
    "AuthMethod",
    "AuthorizationResult",
    "Credentials",
    "DecisionState",
    "DenialKind",
    "Identity",

    # Helpers
    "KEY_ALPHABET",
    "parse_mode",
    "parse_strategy",
]
