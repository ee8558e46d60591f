"""
Tests for the SQLAlchemy-backed store.

Runs against in-memory SQLite through aiosqlite.
"""
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from gatekeeper.core.exceptions import DatabaseError, UnauthorizedError
from gatekeeper.domain.schemas import AccessKey, Role, User
from gatekeeper.infrastructure.database import create_session_factory, create_tables
from gatekeeper.repositories import SQLAlchemyStore
from gatekeeper.services.auth import AuthorizationDecider, Credentials, RoleStore


@pytest_asyncio.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_store(async_engine):
    return SQLAlchemyStore(create_session_factory(async_engine))


@pytest.mark.asyncio
async def test_user_round_trip(sql_store):
    """Test storing and loading a user."""
    user = await sql_store.upsert_user(User(email="db@example.com"))

    loaded = await sql_store.find_user_by_id(user.id)

    assert loaded.id == user.id
    assert loaded.email == "db@example.com"
    assert loaded.role_id is None
    assert await sql_store.find_user_by_id(uuid4()) is None


@pytest.mark.asyncio
async def test_role_round_trip(sql_store):
    """Test storing, renaming and listing roles."""
    role = await sql_store.upsert_role(Role(name="admin", permissions={"user.delete", "user.create"}))

    by_name = await sql_store.find_role_by_name("admin")
    assert by_name.id == role.id
    assert by_name.permissions == {"user.create", "user.delete"}

    by_name.name = "root"
    await sql_store.upsert_role(by_name)
    await sql_store.upsert_role(Role(name="auditor"))

    assert await sql_store.find_role_by_name("admin") is None
    assert (await sql_store.find_role_by_id(role.id)).name == "root"
    assert [r.name for r in await sql_store.list_roles()] == ["auditor", "root"]


@pytest.mark.asyncio
async def test_access_key_round_trip(sql_store):
    """Test key insertion, lookup and the active flag."""
    user = await sql_store.upsert_user(User())
    key = AccessKey(access_key_id="AK_test", secret_hash="0" * 64, owner_user_id=user.id)

    await sql_store.insert_access_key(key)
    loaded = await sql_store.find_access_key_by_id("AK_test")

    assert loaded.owner_user_id == user.id
    assert loaded.active is True
    assert loaded.expires_at == key.expires_at

    assert await sql_store.update_access_key_active("AK_test", False) is True
    assert (await sql_store.find_access_key_by_id("AK_test")).active is False
    assert await sql_store.update_access_key_active("AK_missing", False) is False

    keys = await sql_store.list_access_keys_by_owner(user.id)
    assert [k.access_key_id for k in keys] == ["AK_test"]


@pytest.mark.asyncio
async def test_duplicate_key_id_raises_database_error(sql_store):
    user = await sql_store.upsert_user(User())
    key = AccessKey(access_key_id="AK_dup", secret_hash="0" * 64, owner_user_id=user.id)
    await sql_store.insert_access_key(key)

    with pytest.raises(DatabaseError) as exc_info:
        await sql_store.insert_access_key(key)

    assert exc_info.value.details == {"operation": "insert_access_key"}


@pytest.mark.asyncio
async def test_end_to_end_with_access_key(sql_store, clock, settings):
    """Full flow: role, assignment, issuance and authorization."""
    roles = RoleStore(sql_store)
    decider = AuthorizationDecider.from_store(sql_store, clock=clock, settings=settings)

    await roles.create_role("admin", ["user.create", "user.delete"])
    user = await sql_store.upsert_user(User(email="e2e@example.com"))
    await roles.assign_role(user.id, "admin")
    issued = await decider.access_key_manager.issue(user.id)

    identity = await decider.resolve_identity(credentials=_credentials(issued))
    assert identity.role_name == "admin"

    result = await decider.authorize(["user.create", "user.read"], strategy="ANY", credentials=_credentials(issued))
    assert result.allowed is True

    clock.advance(days=90)
    with pytest.raises(UnauthorizedError):
        await decider.resolve_identity(credentials=_credentials(issued))


def _credentials(issued) -> Credentials:
    return Credentials(access_key_id=issued.access_key_id, secret_key=issued.secret_key)
