"""
Tests for the FastAPI authorization dependencies.
"""
import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from gatekeeper.services.auth.authorization import Identity
from gatekeeper.services.auth.decorators import optional_permissions, require_permissions, require_role


@pytest.fixture
def app(decider) -> FastAPI:
    """App with one endpoint per dependency flavour."""
    app = FastAPI()

    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        # Stand-in for an upstream session layer
        if "x-session-user" in request.headers:
            request.state.user_id = request.headers["x-session-user"]
        return await call_next(request)

    @app.post("/users", dependencies=[Depends(require_permissions(decider, "user.create"))])
    async def create_user():
        return {"created": True}

    @app.get("/dashboard")
    async def dashboard(
        identity: Identity = Depends(require_permissions(decider, ["user.read", "user.create"], strategy="ANY")),
    ):
        return {"user_id": str(identity.user_id), "method": identity.method.value}

    @app.get("/feed")
    async def feed(identity=Depends(optional_permissions(decider, "user.read"))):
        return {"anonymous": identity is None}

    @app.get("/admin")
    async def admin(identity: Identity = Depends(require_role(decider, "admin"))):
        return {"role": identity.role_name}

    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_access_key_headers_grant_access(client, key_manager, admin_user):
    """Test access with a valid access-key pair."""
    issued = await key_manager.issue(admin_user.id)
    headers = {"x-access-key": issued.access_key_id, "x-secret-key": issued.secret_key}

    response = await client.post("/users", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"created": True}


@pytest.mark.asyncio
async def test_missing_credentials_is_401(client):
    """Test that anonymous callers are told to authenticate."""
    response = await client.post("/users")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "AccessKey"


@pytest.mark.asyncio
async def test_bad_secret_is_401(client, key_manager, admin_user):
    issued = await key_manager.issue(admin_user.id)
    headers = {"x-access-key": issued.access_key_id, "x-secret-key": "SK_wrong"}

    response = await client.post("/users", headers=headers)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid access key credentials"


@pytest.mark.asyncio
async def test_lacking_permission_is_403(client, viewer_user):
    """Test that identified callers without rights are forbidden."""
    response = await client.post("/users", headers={"x-session-user": str(viewer_user.id)})

    assert response.status_code == 403
    assert "user.create" in response.json()["detail"]


@pytest.mark.asyncio
async def test_identity_is_injected(client, key_manager, viewer_user):
    issued = await key_manager.issue(viewer_user.id)
    headers = {"x-access-key": issued.access_key_id, "x-secret-key": issued.secret_key}

    response = await client.get("/dashboard", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"user_id": str(viewer_user.id), "method": "access_key"}


@pytest.mark.asyncio
async def test_optional_allows_anonymous(client):
    response = await client.get("/feed")

    assert response.status_code == 200
    assert response.json() == {"anonymous": True}


@pytest.mark.asyncio
async def test_optional_with_identity(client, viewer_user, admin_user):
    response = await client.get("/feed", headers={"x-session-user": str(viewer_user.id)})
    assert response.json() == {"anonymous": False}

    response = await client.get("/feed", headers={"x-session-user": str(admin_user.id)})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_require_role(client, admin_user, viewer_user):
    response = await client.get("/admin", headers={"x-session-user": str(admin_user.id)})
    assert response.status_code == 200
    assert response.json() == {"role": "admin"}

    response = await client.get("/admin", headers={"x-session-user": str(viewer_user.id)})
    assert response.status_code == 403

    response = await client.get("/admin")
    assert response.status_code == 401
