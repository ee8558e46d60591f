"""
Role management for Gatekeeper.

Creates roles, edits their permission sets and assigns them to users. Each
user holds exactly one role; the permission set of that role is the user's
effective permission set.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union
from uuid import UUID

import structlog

from gatekeeper.core.exceptions import AlreadyExistsError, InvalidInputError, NotFoundError
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import Role, User, parse_permissions

logger = structlog.get_logger(__name__)

PermissionInput = Union[str, Iterable[str], None]


def _validate_role_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Role name must be a non-empty string", field="name")
    return name


class RoleStore:
    """CRUD over roles and user-role assignment."""

    def __init__(self, store: IRBACStore):
        self.store = store

    async def create_role(
        self,
        name: str,
        permissions: PermissionInput = None,
        description: Optional[str] = None,
    ) -> Role:
        """
        Create a new role.

        Raises:
            InvalidInputError: Blank name or permission
            AlreadyExistsError: A role with this name exists
        """
        _validate_role_name(name)
        permission_set = parse_permissions(permissions)

        if await self.store.find_role_by_name(name):
            raise AlreadyExistsError(f"Role '{name}' already exists", field="name")

        role = Role(name=name, description=description, permissions=set(permission_set))
        role = await self.store.upsert_role(role)
        logger.info("role_created", role=role.name, permissions=sorted(role.permissions))
        return role

    async def get_role(self, name: str) -> Role:
        """Get role by name."""
        _validate_role_name(name)
        role = await self.store.find_role_by_name(name)
        if not role:
            raise NotFoundError("Role", name)
        return role

    async def get_role_by_id(self, role_id: UUID) -> Role:
        """Get role by ID."""
        role = await self.store.find_role_by_id(role_id)
        if not role:
            raise NotFoundError("Role", role_id)
        return role

    async def get_all_roles(self) -> List[Role]:
        """Get all roles ordered by name."""
        roles = await self.store.list_roles()
        return sorted(roles, key=lambda r: r.name)

    async def update_role_permissions(self, name: str, permissions: PermissionInput) -> Role:
        """Replace a role's permission set."""
        role = await self.get_role(name)
        role.permissions = set(parse_permissions(permissions))
        return await self._save(role, "role_permissions_updated")

    async def add_permissions(self, name: str, permissions: PermissionInput) -> Role:
        """Add permissions to a role."""
        role = await self.get_role(name)
        role.permissions |= parse_permissions(permissions)
        return await self._save(role, "role_permissions_added")

    async def remove_permissions(self, name: str, permissions: PermissionInput) -> Role:
        """Remove permissions from a role. Unknown permissions are ignored."""
        role = await self.get_role(name)
        role.permissions -= parse_permissions(permissions)
        return await self._save(role, "role_permissions_removed")

    async def rename_role(self, name: str, new_name: str) -> Role:
        """Rename a role, keeping names unique."""
        _validate_role_name(new_name)
        role = await self.get_role(name)
        if new_name == name:
            return role

        if await self.store.find_role_by_name(new_name):
            raise AlreadyExistsError(f"Role '{new_name}' already exists", field="name")

        role.name = new_name
        role = await self._save(role, "role_renamed")
        logger.debug("role_rename_details", old_name=name, new_name=new_name)
        return role

    async def assign_role(self, user_id: UUID, role_name: str) -> User:
        """
        Assign a role to a user, replacing any previous role.

        Raises:
            NotFoundError: Unknown user or role
        """
        role = await self.get_role(role_name)
        user = await self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        user.role_id = role.id
        user = await self.store.upsert_user(user)
        logger.info("role_assigned", user_id=str(user_id), role=role.name)
        return user

    async def _save(self, role: Role, event: str) -> Role:
        role.updated_at = datetime.now(timezone.utc)
        role = await self.store.upsert_role(role)
        logger.info(event, role=role.name, permissions=sorted(role.permissions))
        return role
