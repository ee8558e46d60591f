"""
In-process store for users, roles and access keys.

Useful for tests and single-process deployments. Records are copied on the
way in and out so callers never share mutable state with the store.
"""
from typing import Dict, List, Optional
from uuid import UUID

import structlog

from gatekeeper.core.exceptions import DatabaseError
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import AccessKey, Role, User

logger = structlog.get_logger(__name__)


class InMemoryStore(IRBACStore):
    """Dict-backed implementation of the store interface."""

    def __init__(self):
        self._users: Dict[UUID, User] = {}
        self._roles: Dict[UUID, Role] = {}
        self._keys: Dict[str, AccessKey] = {}  # access_key_id -> AccessKey

    async def find_user_by_id(self, user_id: UUID) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def upsert_user(self, user: User) -> User:
        self._users[user.id] = user.model_copy(deep=True)
        return user

    async def find_role_by_name(self, name: str) -> Optional[Role]:
        for role in self._roles.values():
            if role.name == name:
                return role.model_copy(deep=True)
        return None

    async def find_role_by_id(self, role_id: UUID) -> Optional[Role]:
        role = self._roles.get(role_id)
        return role.model_copy(deep=True) if role else None

    async def list_roles(self) -> List[Role]:
        return [role.model_copy(deep=True) for role in self._roles.values()]

    async def upsert_role(self, role: Role) -> Role:
        self._roles[role.id] = role.model_copy(deep=True)
        return role

    async def find_access_key_by_id(self, access_key_id: str) -> Optional[AccessKey]:
        key = self._keys.get(access_key_id)
        return key.model_copy(deep=True) if key else None

    async def insert_access_key(self, access_key: AccessKey) -> AccessKey:
        if access_key.access_key_id in self._keys:
            logger.error("duplicate_access_key_id", access_key_id=access_key.access_key_id)
            raise DatabaseError(
                f"Access key {access_key.access_key_id} already exists",
                operation="insert_access_key",
            )
        self._keys[access_key.access_key_id] = access_key.model_copy(deep=True)
        return access_key

    async def update_access_key_active(self, access_key_id: str, active: bool) -> bool:
        key = self._keys.get(access_key_id)
        if not key:
            return False
        key.active = active
        return True

    async def list_access_keys_by_owner(self, user_id: UUID) -> List[AccessKey]:
        keys = [k for k in self._keys.values() if k.owner_user_id == user_id]
        keys.sort(key=lambda k: k.created_at)
        return [k.model_copy(deep=True) for k in keys]
