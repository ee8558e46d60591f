"""
Authorization dependencies for FastAPI endpoints.

Turns ``AuthorizationDecider`` verdicts into HTTP responses: 401 when the
caller could not be identified, 403 when the caller lacks the rights.
Credentials are read from the ``x-access-key`` / ``x-secret-key`` headers.
A session user is taken from ``request.state.user_id`` when an upstream
session layer has set it.
"""
from typing import Callable, Iterable, Optional, Union
from uuid import UUID

from fastapi import HTTPException, Request, status

from gatekeeper.domain.schemas import AuthorizationMode, PermissionStrategy

from .authorization import AuthorizationDecider, AuthorizationResult, Credentials, DenialKind, Identity


class AuthorizationError(HTTPException):
    """Authorization-specific exception."""

    def __init__(
        self,
        detail: str = "Not authorized to access this resource",
        status_code: int = status.HTTP_403_FORBIDDEN,
    ):
        headers = {"WWW-Authenticate": "AccessKey"} if status_code == status.HTTP_401_UNAUTHORIZED else None
        super().__init__(status_code=status_code, detail=detail, headers=headers)


def _session_user_id(request: Request) -> Optional[UUID]:
    user_id = getattr(request.state, "user_id", None)
    if user_id is None or isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except ValueError:
        return None


def _to_http(result: AuthorizationResult) -> Optional[Identity]:
    if result.denial is DenialKind.UNAUTHORIZED:
        raise AuthorizationError(
            detail=result.reason or "Authentication required",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    if result.denial is DenialKind.FORBIDDEN:
        raise AuthorizationError(detail=result.reason or "Insufficient permissions")
    return result.identity


def require_permissions(
    decider: AuthorizationDecider,
    permissions: Union[str, Iterable[str]],
    strategy: Optional[Union[PermissionStrategy, str]] = None,
    mode: AuthorizationMode = AuthorizationMode.REQUIRED,
) -> Callable:
    """
    Require the caller to hold permissions.

    Usage:
        @router.get("/users", dependencies=[Depends(require_permissions(decider, "user.read"))])
        async def list_users():
            ...

        @router.get("/dashboard")
        async def dashboard(
            identity: Identity = Depends(
                require_permissions(decider, ["user.read", "admin.read"], strategy="ANY")
            ),
        ):
            ...
    """
    required = [permissions] if isinstance(permissions, str) else list(permissions)

    async def permission_checker(request: Request) -> Optional[Identity]:
        result = await decider.authorize(
            required,
            strategy=strategy,
            session_user_id=_session_user_id(request),
            credentials=Credentials.from_headers(request.headers, decider.settings),
            mode=mode,
        )
        identity = _to_http(result)
        request.state.identity = identity
        return identity

    return permission_checker


def optional_permissions(
    decider: AuthorizationDecider,
    permissions: Union[str, Iterable[str]],
    strategy: Optional[Union[PermissionStrategy, str]] = None,
) -> Callable:
    """
    Like ``require_permissions`` but lets unidentified callers through.

    The dependency resolves to None for anonymous callers. Identified callers
    without the permission still get 403.
    """
    return require_permissions(decider, permissions, strategy=strategy, mode=AuthorizationMode.OPTIONAL)


def require_role(
    decider: AuthorizationDecider,
    role_names: Union[str, Iterable[str]],
    mode: AuthorizationMode = AuthorizationMode.REQUIRED,
) -> Callable:
    """
    Require the caller's role to be one of ``role_names``.

    Usage:
        @router.get("/admin", dependencies=[Depends(require_role(decider, "admin"))])
        async def admin_endpoint():
            ...
    """
    names = [role_names] if isinstance(role_names, str) else list(role_names)

    async def role_checker(request: Request) -> Optional[Identity]:
        result = await decider.authorize_role(
            names,
            session_user_id=_session_user_id(request),
            credentials=Credentials.from_headers(request.headers, decider.settings),
            mode=mode,
        )
        identity = _to_http(result)
        request.state.identity = identity
        return identity

    return role_checker


__all__ = [
    "AuthorizationError",
    "optional_permissions",
    "require_permissions",
    "require_role",
]
