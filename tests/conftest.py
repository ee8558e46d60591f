"""
Shared fixtures for Gatekeeper tests.

Provides an in-memory store, a controllable clock and fully wired services.
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from gatekeeper.core.config import Settings
from gatekeeper.domain.schemas import Role, User
from gatekeeper.infrastructure.memory import InMemoryStore
from gatekeeper.services.auth import (
    AccessKeyManager,
    AuthorizationDecider,
    KeyCodec,
    PermissionEngine,
    RoleStore,
)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def settings():
    """Settings with library defaults, isolated from any .env file."""
    return Settings(_env_file=None, ENVIRONMENT="test")


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def codec(clock):
    return KeyCodec(clock)


@pytest.fixture
def role_store(store):
    return RoleStore(store)


@pytest.fixture
def permission_engine(store):
    return PermissionEngine(store)


@pytest.fixture
def key_manager(store, codec, settings):
    return AccessKeyManager(store, codec=codec, settings=settings)


@pytest.fixture
def decider(store, clock, settings):
    return AuthorizationDecider.from_store(store, clock=clock, settings=settings)


@pytest_asyncio.fixture
async def admin_role(role_store) -> Role:
    """Role ``admin`` granting user.create and user.delete."""
    return await role_store.create_role("admin", ["user.create", "user.delete"])


@pytest_asyncio.fixture
async def viewer_role(role_store) -> Role:
    return await role_store.create_role("viewer", ["user.read"])


@pytest_asyncio.fixture
async def admin_user(store, role_store, admin_role) -> User:
    """User U holding the admin role."""
    user = await store.upsert_user(User(email="admin@example.com"))
    return await role_store.assign_role(user.id, admin_role.name)


@pytest_asyncio.fixture
async def viewer_user(store, role_store, viewer_role) -> User:
    user = await store.upsert_user(User(email="viewer@example.com"))
    return await role_store.assign_role(user.id, viewer_role.name)


@pytest_asyncio.fixture
async def roleless_user(store) -> User:
    return await store.upsert_user(User(email="nobody@example.com"))
