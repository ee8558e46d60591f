"""
Tests for credential generation, hashing and expiry.
"""
from datetime import datetime, timedelta, timezone

import pytest

from gatekeeper.core.exceptions import InvalidInputError
from gatekeeper.services.auth.key_codec import KEY_ALPHABET, KeyCodec


class TestGenerateIdentifier:
    """Test random identifier generation."""

    @pytest.mark.parametrize("length,prefix", [(1, "AK"), (32, "AK"), (64, "SK"), (10, "")])
    def test_length_and_alphabet(self, length, prefix):
        """Output has the prefix, the separator and exactly ``length`` random chars."""
        identifier = KeyCodec.generate_identifier(length, prefix)

        if prefix:
            assert identifier.startswith(f"{prefix}_")
            assert len(identifier) == len(prefix) + 1 + length
            token = identifier[len(prefix) + 1:]
        else:
            assert len(identifier) == length
            token = identifier

        assert all(ch in KEY_ALPHABET for ch in token)

    def test_alphabet_has_no_ambiguous_characters(self):
        for ch in "0O1lI":
            assert ch not in KEY_ALPHABET

    def test_successive_calls_differ(self):
        generated = {KeyCodec.generate_identifier(32, "AK") for _ in range(200)}
        assert len(generated) == 200

    @pytest.mark.parametrize("length", [0, -1, 2.5, "32", True])
    def test_invalid_length_rejected(self, length):
        with pytest.raises(InvalidInputError):
            KeyCodec.generate_identifier(length, "AK")


class TestExpiry:
    """Test time-based expiry."""

    def test_boundary_is_inclusive(self, codec, clock):
        """A key is valid at N-1 days and expired at exactly N days."""
        created_at = clock()

        clock.advance(days=89)
        assert codec.is_expired(created_at, 90) is False

        clock.advance(days=1)
        assert codec.is_expired(created_at, 90) is True

    def test_just_before_boundary(self, codec):
        created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        now = created_at + timedelta(days=30) - timedelta(microseconds=1)

        assert codec.is_expired(created_at, 30, now=now) is False
        assert codec.is_expired(created_at, 30, now=now + timedelta(microseconds=1)) is True

    def test_naive_created_at_treated_as_utc(self, codec, clock):
        created_at = clock().replace(tzinfo=None)
        clock.advance(days=1)

        assert codec.is_expired(created_at, 1) is True

    def test_expires_at(self):
        created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert KeyCodec.expires_at(created_at, 90) == datetime(2024, 3, 31, tzinfo=timezone.utc)


class TestSecretHashing:
    """Test secret digests."""

    def test_hash_is_not_the_secret(self):
        secret = KeyCodec.generate_identifier(64, "SK")
        digest = KeyCodec.hash_secret(secret)

        assert digest != secret
        assert len(digest) == 64

    def test_verify_secret(self):
        secret = KeyCodec.generate_identifier(64, "SK")
        digest = KeyCodec.hash_secret(secret)

        assert KeyCodec.verify_secret(secret, digest) is True
        assert KeyCodec.verify_secret(secret + "x", digest) is False
        assert KeyCodec.verify_secret("", digest) is False
