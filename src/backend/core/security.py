"""
Security utilities for session tokens, password hashing and one-time tokens.

Session tokens are stateless JWTs: they are never persisted and are only
invalidated by their own expiry. Logout is handled client-side.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt  # Direct bcrypt usage for password hashing
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from core.config import settings


class SecurityError(Exception):
    """Base exception for security-related errors."""

    pass


class TokenExpiredError(SecurityError):
    """Raised when a token has expired."""

    pass


class TokenInvalidError(SecurityError):
    """Raised when a token is malformed or its signature does not match."""

    pass


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed session token for the given user.

    Args:
        user: User record (id, email, display_name and is_admin are read)
        expires_delta: Custom lifetime (default: SECURITY_ACCESS_TOKEN_EXPIRE_DAYS)

    Returns:
        JWT access token string

    Raises:
        SecurityError: If token creation fails
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.security.access_token_expire_days)
    expire = now + expires_delta

    payload = {
        "id": str(user.id),
        "email": user.email,
        "displayName": user.display_name,
        "isAdmin": bool(user.is_admin),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }

    try:
        return jwt.encode(
            payload,
            settings.security.jwt_secret_key_property,
            algorithm=settings.security.algorithm,
        )
    except Exception as e:
        raise SecurityError(f"Failed to create access token: {str(e)}")


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed or the signature is wrong
    """
    try:
        payload = jwt.decode(
            token,
            settings.security.jwt_secret_key_property,
            algorithms=[settings.security.algorithm],
            options={"require": ["exp", "id"]},
        )
    except ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except InvalidTokenError:
        raise TokenInvalidError("Invalid token")
    return payload


def get_user_id_from_token(payload: Dict[str, Any]) -> str:
    """Extract user ID from token payload.

    Raises:
        TokenInvalidError: If user ID is missing
    """
    user_id = payload.get("id")
    if not user_id:
        raise TokenInvalidError("User ID missing from token")
    return str(user_id)


def get_token_expiry(payload: Dict[str, Any]) -> datetime:
    """Return the expiry of a decoded token as a naive UTC datetime."""
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds=settings.security.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its bcrypt hash.

    Federated accounts store a non-bcrypt placeholder, which never matches.

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Not a bcrypt hash (e.g. a federated placeholder)
        return False


def generate_one_time_token() -> str:
    """Generate a 32-byte, hex-encoded token for email verification or reset."""
    return secrets.token_hex(32)
