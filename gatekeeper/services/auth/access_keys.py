"""
Access key management for Gatekeeper.

Issues access-key/secret-key pairs for programmatic access, verifies them and
revokes them. Only a digest of each secret is stored; the plaintext secret is
returned once, at issuance.
"""
from typing import Any, List, Mapping, NoReturn, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from gatekeeper.core.config import Settings, get_settings
from gatekeeper.core.exceptions import ForbiddenError, InvalidInputError, NotFoundError, UnauthorizedError
from gatekeeper.domain.interfaces import IRBACStore
from gatekeeper.domain.schemas import AccessKey, AccessKeyOptions, IssuedAccessKey, User

from .key_codec import KeyCodec

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid access key credentials"

# Compared against when the key ID is unknown, so the miss path does the same work.
_DUMMY_SECRET_HASH = KeyCodec.hash_secret("")

OptionsInput = Union[AccessKeyOptions, Mapping[str, Any], None]


class AccessKeyManager:
    """Issues, verifies and revokes access keys."""

    def __init__(
        self,
        store: IRBACStore,
        codec: Optional[KeyCodec] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.codec = codec or KeyCodec()
        self.settings = settings or get_settings()

    def _parse_options(self, options: OptionsInput) -> AccessKeyOptions:
        if options is None:
            options = {}
        if isinstance(options, AccessKeyOptions):
            return options
        if not isinstance(options, Mapping):
            raise InvalidInputError("Access key options must be a mapping", field="options")

        defaults = {
            "max_age_days": self.settings.ACCESS_KEY_MAX_AGE_DAYS,
            "access_key_length": self.settings.ACCESS_KEY_LENGTH,
            "secret_key_length": self.settings.SECRET_KEY_LENGTH,
        }
        try:
            return AccessKeyOptions.model_validate({**defaults, **options})
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidInputError(f"Invalid access key options: {fields}", field="options") from e

    async def issue(self, user_id: UUID, options: OptionsInput = None) -> IssuedAccessKey:
        """
        Issue a new access key for a user.

        Args:
            user_id: Owner of the key
            options: ``AccessKeyOptions`` or a mapping of its fields

        Returns:
            The key ID and the plaintext secret. The secret cannot be
            retrieved again.

        Raises:
            InvalidInputError: Malformed options
            NotFoundError: Unknown user
        """
        opts = self._parse_options(options)

        user = await self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        access_key_id = self.codec.generate_identifier(opts.access_key_length, self.settings.ACCESS_KEY_PREFIX)
        secret_key = self.codec.generate_identifier(opts.secret_key_length, self.settings.SECRET_KEY_PREFIX)

        access_key = AccessKey(
            access_key_id=access_key_id,
            secret_hash=self.codec.hash_secret(secret_key),
            owner_user_id=user.id,
            name=opts.name,
            created_at=self.codec.now(),
            max_age_days=opts.max_age_days,
            active=True,
        )
        await self.store.insert_access_key(access_key)

        logger.info(
            "access_key_issued",
            user_id=str(user.id),
            access_key_id=access_key_id,
            max_age_days=opts.max_age_days,
        )

        return IssuedAccessKey(
            access_key_id=access_key_id,
            secret_key=secret_key,
            owner_user_id=user.id,
            name=opts.name,
            expires_at=access_key.expires_at,
        )

    async def authenticate(self, access_key_id: str, secret_key: str) -> User:
        """
        Verify a credential pair and return the owning user.

        Raises:
            UnauthorizedError: For any failure. The message is the same for
                every cause; the log event records which check failed.
        """
        if not isinstance(access_key_id, str) or not access_key_id:
            self._deny("missing_access_key", access_key_id)
        if not isinstance(secret_key, str) or not secret_key:
            self._deny("missing_secret_key", access_key_id)

        access_key = await self.store.find_access_key_by_id(access_key_id)
        secret_ok = self.codec.verify_secret(
            secret_key,
            access_key.secret_hash if access_key else _DUMMY_SECRET_HASH,
        )

        if not access_key:
            self._deny("unknown_access_key", access_key_id)
        if not access_key.active:
            self._deny("inactive_access_key", access_key_id)
        if self.codec.is_expired(access_key.created_at, access_key.max_age_days):
            self._deny("expired_access_key", access_key_id)
        if not secret_ok:
            self._deny("invalid_secret_key", access_key_id)

        user = await self.store.find_user_by_id(access_key.owner_user_id)
        if not user:
            self._deny("owner_not_found", access_key_id)
        if not user.is_active:
            self._deny("owner_inactive", access_key_id)

        logger.debug("access_key_authenticated", access_key_id=access_key_id, user_id=str(user.id))
        return user

    def _deny(self, reason: str, access_key_id: Any) -> NoReturn:
        logger.warning(
            "access_key_auth_failed",
            reason=reason,
            access_key_id=access_key_id if isinstance(access_key_id, str) else None,
        )
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

    async def deactivate(
        self,
        access_key_id: str,
        requesting_user_id: Optional[Union[UUID, str]] = None,
    ) -> None:
        """
        Deactivate a key. Idempotent.

        Args:
            access_key_id: Key to deactivate
            requesting_user_id: When given, must be the key's owner.
                Administrative callers omit it.

        Raises:
            InvalidInputError: ``requesting_user_id`` is not a UUID
            NotFoundError: Unknown key
            ForbiddenError: Requesting user does not own the key
        """
        if requesting_user_id is not None and not isinstance(requesting_user_id, UUID):
            try:
                requesting_user_id = UUID(str(requesting_user_id))
            except ValueError as e:
                raise InvalidInputError("Requesting user ID must be a UUID", field="requesting_user_id") from e

        access_key = await self.store.find_access_key_by_id(access_key_id)
        if not access_key:
            raise NotFoundError("AccessKey", access_key_id)

        if requesting_user_id is not None and access_key.owner_user_id != requesting_user_id:
            logger.warning(
                "access_key_deactivation_forbidden",
                access_key_id=access_key_id,
                requesting_user_id=str(requesting_user_id),
            )
            raise ForbiddenError("You can only deactivate your own access keys")

        if not access_key.active:
            return

        await self.store.update_access_key_active(access_key_id, False)
        logger.info(
            "access_key_deactivated",
            access_key_id=access_key_id,
            user_id=str(access_key.owner_user_id),
        )

    async def deactivate_all(self, user_id: UUID) -> int:
        """
        Deactivate every active key owned by a user.

        Returns:
            Number of keys that were active before the call
        """
        keys = await self.store.list_access_keys_by_owner(user_id)
        count = 0
        for access_key in keys:
            if not access_key.active:
                continue
            if await self.store.update_access_key_active(access_key.access_key_id, False):
                count += 1

        logger.info("access_keys_deactivated", user_id=str(user_id), count=count)
        return count

    async def get_user_access_keys(self, user_id: UUID, include_inactive: bool = True) -> List[AccessKey]:
        """List a user's keys, oldest first."""
        keys = await self.store.list_access_keys_by_owner(user_id)
        if include_inactive:
            return keys
        return [
            k for k in keys
            if k.active and not self.codec.is_expired(k.created_at, k.max_age_days)
        ]
