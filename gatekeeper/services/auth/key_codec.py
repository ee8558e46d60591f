"""
Credential generation, hashing and expiry for access keys.
"""
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Optional

from gatekeeper.core.clock import Clock, ensure_utc, utcnow
from gatekeeper.core.exceptions import InvalidInputError

# Alphanumerics without the look-alikes 0/O, 1/l/I.
KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"
PREFIX_SEPARATOR = "_"


class KeyCodec:
    """Generates identifiers and secrets and evaluates key age."""

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock

    def now(self) -> datetime:
        """Current time from the injected clock."""
        return ensure_utc(self._clock())

    @staticmethod
    def generate_identifier(length: int, prefix: str = "") -> str:
        """
        Generate a random token, optionally prefixed.

        Args:
            length: Number of random characters, excluding the prefix
            prefix: Type prefix such as ``AK``; joined with ``_``

        Returns:
            ``<prefix>_<token>`` or just ``<token>`` when prefix is empty

        Raises:
            InvalidInputError: If length is not a positive integer
        """
        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            raise InvalidInputError(f"Identifier length must be a positive integer, got {length!r}", field="length")
        if prefix is None:
            prefix = ""
        if not isinstance(prefix, str):
            raise InvalidInputError("Identifier prefix must be a string", field="prefix")

        token = "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))
        return f"{prefix}{PREFIX_SEPARATOR}{token}" if prefix else token

    def is_expired(
        self,
        created_at: datetime,
        max_age_days: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Check whether ``max_age_days`` have elapsed since ``created_at``.

        Exactly ``max_age_days`` elapsed counts as expired.
        """
        current = ensure_utc(now) if now is not None else self.now()
        return current - ensure_utc(created_at) >= timedelta(days=max_age_days)

    @staticmethod
    def expires_at(created_at: datetime, max_age_days: int) -> datetime:
        """First moment at which a key created at ``created_at`` is expired."""
        return ensure_utc(created_at) + timedelta(days=max_age_days)

    @staticmethod
    def hash_secret(secret: str) -> str:
        """Hash a secret for storage."""
        return hashlib.sha256(secret.encode("utf-8", "surrogatepass")).hexdigest()

    @classmethod
    def verify_secret(cls, secret: str, secret_hash: str) -> bool:
        """Compare a secret against a stored digest in constant time."""
        return hmac.compare_digest(cls.hash_secret(secret), secret_hash)
