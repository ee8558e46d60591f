"""
SQLAlchemy persistence for Gatekeeper.
"""
from .base import Base, create_engine, create_session_factory, create_tables
from .models import AccessKeyModel, RoleModel, UserModel

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "AccessKeyModel",
    "RoleModel",
    "UserModel",
]
