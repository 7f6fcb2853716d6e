"""
Authentication and authorization dependencies for FastAPI.

This module provides FastAPI dependency functions for authentication,
authorization, and access to the device clients owned by the application
lifespan.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.exceptions import (
    AccountDisabledError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
)
from core.security import SecurityError, decode_token, get_user_id_from_token
from crud.user_crud import UserCRUD
from db import User

# HTTP Bearer security scheme; a missing header is reported as our own 401
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity attached to an authenticated request."""

    id: UUID
    email: str
    display_name: str
    is_admin: bool

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            is_admin=bool(user.is_admin),
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    The user is re-read on every request, so deactivation and admin changes
    apply immediately rather than at token expiry.

    Raises:
        UnauthenticatedError: No bearer token (401)
        ForbiddenError: Malformed, tampered or expired token (403)
        NotFoundError: The user behind the token no longer exists (404)
        AccountDisabledError: The account has been deactivated (403)
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(get_user_id_from_token(payload))
    except (SecurityError, ValueError):
        raise ForbiddenError()

    user = await UserCRUD.find_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    if not user.is_active:
        raise AccountDisabledError()

    return CurrentUser.from_user(user)


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require the authenticated user to be an administrator."""
    if not current_user.is_admin:
        raise ForbiddenError("Admin privileges required")
    return current_user


# ------------------------------------------------------------------------------
# Lifespan-owned clients
# ------------------------------------------------------------------------------


def get_pump_controller(request: Request):
    return request.app.state.pump_controller


def get_auth_service(request: Request):
    return request.app.state.auth_service
