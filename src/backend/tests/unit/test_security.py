"""
Unit tests for session tokens and password hashing.

Tests:
- Token claims and expiry
- Expired, tampered and malformed tokens
- bcrypt hashing and the federated placeholder
- One-time token format
"""

from datetime import timedelta
from types import SimpleNamespace
from uuid import uuid4

import jwt
import pytest

from core.config import settings
from core.security import (
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_token,
    generate_one_time_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)


def _user(**overrides):
    fields = {
        "id": uuid4(),
        "email": "operator@vegobolt.com",
        "display_name": "Maria Santos",
        "is_admin": False,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestSessionTokens:
    """Tests for issuing and validating session tokens."""

    def test_token_carries_identity_claims(self):
        user = _user(is_admin=True)

        payload = decode_token(create_access_token(user))

        assert payload["id"] == str(user.id)
        assert payload["email"] == user.email
        assert payload["displayName"] == "Maria Santos"
        assert payload["isAdmin"] is True
        assert get_user_id_from_token(payload) == str(user.id)

    def test_default_lifetime_is_seven_days(self):
        payload = decode_token(create_access_token(_user()))

        lifetime = payload["exp"] - payload["iat"]
        assert lifetime == settings.security.access_token_expire_days * 24 * 3600

    def test_expired_token_rejected(self):
        token = create_access_token(_user(), expires_delta=timedelta(seconds=-10))

        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_wrong_signature_rejected(self):
        forged = jwt.encode(
            {"id": str(uuid4()), "exp": 9999999999},
            "not-the-server-secret-but-long-enough-anyway",
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            decode_token(forged)

    def test_malformed_token_rejected(self):
        with pytest.raises(TokenInvalidError):
            decode_token("not.a.jwt")

    def test_token_without_user_id_rejected(self):
        token = jwt.encode(
            {"email": "x@vegobolt.com", "exp": 9999999999},
            settings.security.jwt_secret_key_property,
            algorithm=settings.security.algorithm,
        )

        with pytest.raises(TokenInvalidError):
            decode_token(token)


class TestPasswordHashing:
    """Tests for bcrypt password hashing."""

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert hashed.startswith("$2")
        assert verify_password("correct horse", hashed) is True
        assert verify_password("wrong horse", hashed) is False

    def test_federated_placeholder_never_matches(self):
        assert verify_password("google:12345", "google:12345") is False
        assert verify_password("anything", "google:12345") is False

    def test_empty_hash_never_matches(self):
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False


class TestOneTimeTokens:
    def test_token_is_32_bytes_hex(self):
        token = generate_one_time_token()

        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self):
        assert len({generate_one_time_token() for _ in range(50)}) == 50
