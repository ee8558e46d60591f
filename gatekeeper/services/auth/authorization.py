"""
Authorization decisions for Gatekeeper.

Resolves the caller's identity from a session user or an access-key
credential pair and decides whether a permission (or role) requirement is
met. Decisions move through ``UNAUTHENTICATED -> IDENTITY_RESOLVED`` and end
in ``ALLOWED`` or ``DENIED``. A denial carries an error kind so callers can
tell an unknown caller (401) from a known caller without rights (403).
"""
from enum import Enum
from typing import FrozenSet, Iterable, List, Mapping, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from gatekeeper.core.clock import Clock, utcnow
from gatekeeper.core.config import Settings, get_settings
from gatekeeper.core.exceptions import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import AuthorizationMode, Role, User, parse_permissions

from .access_keys import AccessKeyManager
from .key_codec import KeyCodec
from .permissions import PermissionEngine, StrategyInput, parse_strategy

logger = structlog.get_logger(__name__)

ModeInput = Union[AuthorizationMode, str]


def parse_mode(mode: ModeInput) -> AuthorizationMode:
    """Coerce ``"required"``/``"optional"`` (any case) into a mode."""
    if isinstance(mode, AuthorizationMode):
        return mode
    if isinstance(mode, str):
        try:
            return AuthorizationMode(mode.lower())
        except ValueError:
            pass
    raise InvalidInputError(f"Unknown authorization mode: {mode!r}", field="mode")


class DecisionState(str, Enum):
    """States of an authorization decision."""
    UNAUTHENTICATED = "unauthenticated"
    IDENTITY_RESOLVED = "identity_resolved"
    ALLOWED = "allowed"
    DENIED = "denied"


class DenialKind(str, Enum):
    """Why a decision was denied."""
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


class AuthMethod(str, Enum):
    """How the identity was established."""
    SESSION = "session"
    ACCESS_KEY = "access_key"


class Credentials(BaseModel):
    """Access-key credential pair taken from request metadata."""
    access_key_id: str
    secret_key: str = Field(..., repr=False)

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        settings: Optional[Settings] = None,
    ) -> Optional["Credentials"]:
        """
        Extract credentials from request headers.

        Returns None when neither header is present. A pair with one header
        missing is returned with an empty value so that it fails
        authentication instead of being treated as anonymous.
        """
        settings = settings or get_settings()
        access_key_id = headers.get(settings.ACCESS_KEY_HEADER)
        secret_key = headers.get(settings.SECRET_KEY_HEADER)
        if access_key_id is None and secret_key is None:
            return None
        return cls(access_key_id=access_key_id or "", secret_key=secret_key or "")


class Identity(BaseModel):
    """A resolved caller."""
    user: User
    method: AuthMethod
    access_key_id: Optional[str] = None
    role: Optional[Role] = None
    permissions: FrozenSet[str] = Field(default_factory=frozenset)

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def role_name(self) -> Optional[str]:
        return self.role.name if self.role else None


class AuthorizationResult(BaseModel):
    """Verdict of an authorization decision."""
    allowed: bool
    state: DecisionState
    identity: Optional[Identity] = None
    denial: Optional[DenialKind] = None
    reason: Optional[str] = None

    @property
    def denied(self) -> bool:
        """Check if authorization was denied."""
        return not self.allowed

    @property
    def is_anonymous(self) -> bool:
        """Allowed without an identity (optional mode only)."""
        return self.allowed and self.identity is None

    def raise_for_denial(self) -> "AuthorizationResult":
        """
        Raise the matching error if denied, otherwise return self.

        Raises:
            UnauthorizedError: Identity could not be established
            ForbiddenError: Identity lacks the required rights
        """
        if self.denial is DenialKind.UNAUTHORIZED:
            raise UnauthorizedError(self.reason)
        if self.denial is DenialKind.FORBIDDEN:
            raise ForbiddenError(self.reason)
        return self


class AuthorizationDecider:
    """
    Entry point for request-handling glue.

    Combines identity resolution (session or access key) with permission
    evaluation and returns an ``AuthorizationResult``. ``DatabaseError`` from
    the store always propagates.
    """

    def __init__(
        self,
        store: IRBACStore,
        permission_engine: Optional[PermissionEngine] = None,
        access_key_manager: Optional[AccessKeyManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.permission_engine = permission_engine or PermissionEngine(store)
        self.access_key_manager = access_key_manager or AccessKeyManager(store, settings=self.settings)

    @classmethod
    def from_store(
        cls,
        store: IRBACStore,
        clock: Clock = utcnow,
        settings: Optional[Settings] = None,
    ) -> "AuthorizationDecider":
        """Wire a decider and its collaborators around one store and clock."""
        settings = settings or get_settings()
        return cls(
            store,
            permission_engine=PermissionEngine(store),
            access_key_manager=AccessKeyManager(store, codec=KeyCodec(clock), settings=settings),
            settings=settings,
        )

    async def resolve_identity(
        self,
        session_user_id: Optional[UUID] = None,
        credentials: Optional[Credentials] = None,
    ) -> Identity:
        """
        Establish who the caller is. A session user takes precedence.

        Raises:
            UnauthorizedError: No identity source, or the source is invalid
        """
        if session_user_id is not None:
            user = await self.store.find_user_by_id(session_user_id)
            if not user or not user.is_active:
                logger.warning("session_user_rejected", user_id=str(session_user_id))
                raise UnauthorizedError("Session user is not valid")
            identity = Identity(user=user, method=AuthMethod.SESSION)
        elif credentials is not None:
            user = await self.access_key_manager.authenticate(
                credentials.access_key_id,
                credentials.secret_key,
            )
            identity = Identity(
                user=user,
                method=AuthMethod.ACCESS_KEY,
                access_key_id=credentials.access_key_id,
            )
        else:
            raise UnauthorizedError("Authentication required")

        return await self._enrich(identity)

    async def _enrich(self, identity: Identity) -> Identity:
        if identity.user.role_id is None:
            return identity
        role = await self.store.find_role_by_id(identity.user.role_id)
        if role:
            identity.role = role
            identity.permissions = frozenset(role.permissions)
        return identity

    async def _resolve_or_verdict(
        self,
        session_user_id: Optional[UUID],
        credentials: Optional[Credentials],
        mode: AuthorizationMode,
    ) -> Union[Identity, AuthorizationResult]:
        try:
            return await self.resolve_identity(session_user_id, credentials)
        except UnauthorizedError as e:
            if mode is AuthorizationMode.OPTIONAL:
                logger.debug("authorization_anonymous", reason=e.message)
                return AuthorizationResult(
                    allowed=True,
                    state=DecisionState.UNAUTHENTICATED,
                    reason="Proceeding anonymously",
                )
            return AuthorizationResult(
                allowed=False,
                state=DecisionState.DENIED,
                denial=DenialKind.UNAUTHORIZED,
                reason=e.message,
            )

    async def authorize(
        self,
        permissions: Union[str, Iterable[str]],
        *,
        strategy: Optional[StrategyInput] = None,
        session_user_id: Optional[UUID] = None,
        credentials: Optional[Credentials] = None,
        mode: ModeInput = AuthorizationMode.REQUIRED,
    ) -> AuthorizationResult:
        """
        Decide a permission requirement.

        Args:
            permissions: One permission or a list of them
            strategy: ALL or ANY; defaults to ``DEFAULT_PERMISSION_STRATEGY``
            session_user_id: User established by an upstream session layer
            credentials: Access-key credential pair
            mode: REQUIRED denies on identity failure; OPTIONAL proceeds
                anonymously. Insufficient permissions deny in both modes.

        Returns:
            AuthorizationResult
        """
        mode = parse_mode(mode)
        strategy = parse_strategy(strategy or self.settings.DEFAULT_PERMISSION_STRATEGY)
        required: List[str] = sorted(parse_permissions(permissions))

        resolved = await self._resolve_or_verdict(session_user_id, credentials, mode)
        if isinstance(resolved, AuthorizationResult):
            return self._log(resolved, required=required)

        identity = resolved
        if identity.role is None:
            result = self._forbid(identity, "No role assigned")
        elif self.permission_engine.evaluate(identity.permissions, required, strategy):
            result = AuthorizationResult(
                allowed=True,
                state=DecisionState.ALLOWED,
                identity=identity,
                reason=f"Permission requirement met ({strategy.value})",
            )
        else:
            missing = sorted(set(required) - identity.permissions)
            result = self._forbid(identity, f"Missing required permissions: {', '.join(missing)}")

        return self._log(result, required=required, strategy=strategy.value)

    async def authorize_role(
        self,
        role_names: Union[str, Iterable[str]],
        *,
        session_user_id: Optional[UUID] = None,
        credentials: Optional[Credentials] = None,
        mode: ModeInput = AuthorizationMode.REQUIRED,
    ) -> AuthorizationResult:
        """
        Decide a role requirement by comparing the caller's role name.

        With several names, holding any one of them is sufficient.
        """
        mode = parse_mode(mode)
        names = {role_names} if isinstance(role_names, str) else set(role_names)

        resolved = await self._resolve_or_verdict(session_user_id, credentials, mode)
        if isinstance(resolved, AuthorizationResult):
            return self._log(resolved, roles=sorted(names))

        identity = resolved
        if identity.role_name is not None and identity.role_name in names:
            result = AuthorizationResult(
                allowed=True,
                state=DecisionState.ALLOWED,
                identity=identity,
                reason=f"Role '{identity.role_name}' accepted",
            )
        else:
            result = self._forbid(identity, f"Requires one of these roles: {', '.join(sorted(names))}")

        return self._log(result, roles=sorted(names))

    async def check_user_permission(self, user_id: UUID, permission: str) -> bool:
        """Non-raising permission check for an already known user."""
        try:
            return await self.permission_engine.check_permission(user_id, permission)
        except NotFoundError:
            return False

    async def check_user_role(self, user_id: UUID, role_name: str) -> bool:
        """Non-raising role check for an already known user."""
        try:
            info = await self.permission_engine.get_user_role_info(user_id)
        except NotFoundError:
            return False
        return info.role_name == role_name

    @staticmethod
    def _forbid(identity: Identity, reason: str) -> AuthorizationResult:
        return AuthorizationResult(
            allowed=False,
            state=DecisionState.DENIED,
            identity=identity,
            denial=DenialKind.FORBIDDEN,
            reason=reason,
        )

    @staticmethod
    def _log(result: AuthorizationResult, **context) -> AuthorizationResult:
        logger.info(
            "authorization_decision",
            user_id=str(result.identity.user_id) if result.identity else None,
            method=result.identity.method.value if result.identity else None,
            state=result.state.value,
            allowed=result.allowed,
            denial=result.denial.value if result.denial else None,
            reason=result.reason,
            **context,
        )
        return result


__all__ = [
    "AuthMethod",
    "AuthorizationDecider",
    "AuthorizationResult",
    "Credentials",
    "DecisionState",
    "DenialKind",
    "Identity",
    "parse_mode",
]
