from .access_key import AccessKeyRepository
from .role import RoleRepository
from .store import SQLAlchemyStore
from .user import UserRepository

__all__ = [
    "AccessKeyRepository",
    "RoleRepository",
    "SQLAlchemyStore",
    "UserRepository",
]
