"""
SQLAlchemy-backed implementation of the store interface.

Each operation runs in its own short-lived session. Backend failures are
wrapped in ``DatabaseError`` and re-raised; nothing is retried.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.core.exceptions import DatabaseError
from gatekeeper.core.logging import log_error_details
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import AccessKey, Role, User
from gatekeeper.repositories.access_key import AccessKeyRepository
from gatekeeper.repositories.role import RoleRepository
from gatekeeper.repositories.user import UserRepository

logger = structlog.get_logger(__name__)


class SQLAlchemyStore(IRBACStore):
    """Store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("database_operation_failed", **log_error_details(e, operation=operation))
                raise DatabaseError(operation=operation) from e

    async def find_user_by_id(self, user_id: UUID) -> Optional[User]:
        async with self._session("find_user_by_id") as session:
            row = await UserRepository(session).get(user_id)
            return User.model_validate(row) if row else None

    async def upsert_user(self, user: User) -> User:
        async with self._session("upsert_user") as session:
            row = await UserRepository(session).upsert(user.model_dump())
            return User.model_validate(row)

    async def find_role_by_name(self, name: str) -> Optional[Role]:
        async with self._session("find_role_by_name") as session:
            row = await RoleRepository(session).get_by_name(name)
            return Role.model_validate(row) if row else None

    async def find_role_by_id(self, role_id: UUID) -> Optional[Role]:
        async with self._session("find_role_by_id") as session:
            row = await RoleRepository(session).get(role_id)
            return Role.model_validate(row) if row else None

    async def list_roles(self) -> List[Role]:
        async with self._session("list_roles") as session:
            rows = await RoleRepository(session).list_all()
            return [Role.model_validate(row) for row in rows]

    async def upsert_role(self, role: Role) -> Role:
        data = role.model_dump()
        data["permissions"] = sorted(role.permissions)
        async with self._session("upsert_role") as session:
            row = await RoleRepository(session).upsert(data)
            return Role.model_validate(row)

    async def find_access_key_by_id(self, access_key_id: str) -> Optional[AccessKey]:
        async with self._session("find_access_key_by_id") as session:
            row = await AccessKeyRepository(session).get(access_key_id)
            return AccessKey.model_validate(row) if row else None

    async def insert_access_key(self, access_key: AccessKey) -> AccessKey:
        async with self._session("insert_access_key") as session:
            row = await AccessKeyRepository(session).create(access_key.model_dump())
            return AccessKey.model_validate(row)

    async def update_access_key_active(self, access_key_id: str, active: bool) -> bool:
        async with self._session("update_access_key_active") as session:
            return await AccessKeyRepository(session).set_active(access_key_id, active)

    async def list_access_keys_by_owner(self, user_id: UUID) -> List[AccessKey]:
        async with self._session("list_access_keys_by_owner") as session:
            rows = await AccessKeyRepository(session).list_by_owner(user_id)
            return [AccessKey.model_validate(row) for row in rows]
