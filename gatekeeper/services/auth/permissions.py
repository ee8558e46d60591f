"""
Permission resolution and evaluation.

A user's effective permissions are the permission set of their role. Checks
are plain set containment; there is no wildcard matching.
"""
from typing import AbstractSet, FrozenSet, Iterable, Union
from uuid import UUID

import structlog

from gatekeeper.core.exceptions import InvalidInputError, NotFoundError
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import PermissionStrategy, Role, User, UserRoleInfo, parse_permissions

logger = structlog.get_logger(__name__)

StrategyInput = Union[PermissionStrategy, str]


def parse_strategy(strategy: StrategyInput) -> PermissionStrategy:
    """Coerce ``"ALL"``/``"ANY"`` (any case) into a strategy."""
    if isinstance(strategy, PermissionStrategy):
        return strategy
    if isinstance(strategy, str):
        try:
            return PermissionStrategy(strategy.upper())
        except ValueError:
            pass
    raise InvalidInputError(f"Unknown permission strategy: {strategy!r}", field="strategy")


class PermissionEngine:
    """Read-only projection over users, roles and their permissions."""

    def __init__(self, store: IRBACStore):
        self.store = store

    @staticmethod
    def evaluate(
        granted: AbstractSet[str],
        permissions: Union[str, Iterable[str]],
        strategy: StrategyInput = PermissionStrategy.ALL,
    ) -> bool:
        """
        Evaluate required permissions against a granted set.

        ALL over an empty list is true. ANY over an empty list is false so that
        an empty requirement never opens access by accident.
        """
        strategy = parse_strategy(strategy)
        if isinstance(permissions, str):
            permissions = [permissions]
        required = list(parse_permissions(permissions))

        if strategy is PermissionStrategy.ALL:
            return all(p in granted for p in required)
        return any(p in granted for p in required)

    async def _load_user_and_role(self, user_id: UUID) -> tuple[User, Role]:
        user = await self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        if user.role_id is None:
            raise NotFoundError("Role", f"<none assigned to user {user_id}>")

        role = await self.store.find_role_by_id(user.role_id)
        if not role:
            raise NotFoundError("Role", user.role_id)
        return user, role

    async def resolve_permissions(self, user_id: UUID) -> FrozenSet[str]:
        """
        Get the effective permission set of a user.

        Raises:
            NotFoundError: If the user or its role cannot be resolved
        """
        _, role = await self._load_user_and_role(user_id)
        return frozenset(role.permissions)

    async def check_permission(self, user_id: UUID, permission: str) -> bool:
        """Check a single permission."""
        granted = await self.resolve_permissions(user_id)
        allowed = self.evaluate(granted, [permission])
        logger.debug("permission_checked", user_id=str(user_id), permission=permission, allowed=allowed)
        return allowed

    async def check_multiple_permissions(
        self,
        user_id: UUID,
        permissions: Iterable[str],
        strategy: StrategyInput = PermissionStrategy.ALL,
    ) -> bool:
        """Check several permissions under an ALL or ANY strategy."""
        strategy = parse_strategy(strategy)
        granted = await self.resolve_permissions(user_id)
        allowed = self.evaluate(granted, permissions, strategy)
        logger.debug(
            "permissions_checked",
            user_id=str(user_id),
            strategy=strategy.value,
            allowed=allowed,
        )
        return allowed

    async def has_any_permission(self, user_id: UUID, permissions: Iterable[str]) -> bool:
        """True if the user holds at least one of the permissions."""
        return await self.check_multiple_permissions(user_id, permissions, PermissionStrategy.ANY)

    async def has_all_permissions(self, user_id: UUID, permissions: Iterable[str]) -> bool:
        """True if the user holds every one of the permissions."""
        return await self.check_multiple_permissions(user_id, permissions, PermissionStrategy.ALL)

    async def get_user_role_info(self, user_id: UUID) -> UserRoleInfo:
        """Describe a user's role and the permissions it grants."""
        user, role = await self._load_user_and_role(user_id)
        return UserRoleInfo(
            user_id=user.id,
            role_id=role.id,
            role_name=role.name,
            permissions=sorted(role.permissions),
        )
