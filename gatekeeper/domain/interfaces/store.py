"""
Persistence collaborator interface for users, roles and access keys.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from gatekeeper.domain.schemas import AccessKey, Role, User


class IRBACStore(ABC):
    """
    Lookup/upsert operations the authorization core depends on.

    Implementations raise ``DatabaseError`` on backend failure and return
    ``None`` for absent records.
    """

    @abstractmethod
    async def find_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def upsert_user(self, user: User) -> User:
        """Insert or replace a user."""
        pass

    @abstractmethod
    async def find_role_by_name(self, name: str) -> Optional[Role]:
        """Get a role by its exact, case-sensitive name."""
        pass

    @abstractmethod
    async def find_role_by_id(self, role_id: UUID) -> Optional[Role]:
        """Get a role by ID."""
        pass

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        """List all roles."""
        pass

    @abstractmethod
    async def upsert_role(self, role: Role) -> Role:
        """Insert or replace a role keyed by ID."""
        pass

    @abstractmethod
    async def find_access_key_by_id(self, access_key_id: str) -> Optional[AccessKey]:
        """Get an access key by its public identifier."""
        pass

    @abstractmethod
    async def insert_access_key(self, access_key: AccessKey) -> AccessKey:
        """Store a newly issued access key."""
        pass

    @abstractmethod
    async def update_access_key_active(self, access_key_id: str, active: bool) -> bool:
        """Set the active flag. Returns False if the key does not exist."""
        pass

    @abstractmethod
    async def list_access_keys_by_owner(self, user_id: UUID) -> List[AccessKey]:
        """List every key owned by a user, oldest first."""
        pass
