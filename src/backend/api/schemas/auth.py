"""
Authentication request and response schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from core.schema_base import HTTPSchemaModel, RequestSchemaModel


class RegisterRequest(RequestSchemaModel):
    email: EmailStr
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginRequest(RequestSchemaModel):
    email: EmailStr
    password: str = Field(min_length=1)


class GoogleLoginRequest(RequestSchemaModel):
    id_token: str = Field(min_length=1)


class EmailRequest(RequestSchemaModel):
    """Body for resend-verification and password-reset requests."""

    email: EmailStr


class ResetPasswordRequest(RequestSchemaModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class UserRead(HTTPSchemaModel):
    """Public view of a user. The password hash is never part of it."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    display_name: str
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool
    is_admin: bool
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime


class AuthData(HTTPSchemaModel):
    user: UserRead
    token: str


class TokenInfo(HTTPSchemaModel):
    id: str
    email: str
    expires_at: datetime


class TokenVerifyData(HTTPSchemaModel):
    user: UserRead
    token_info: TokenInfo


class ProfileData(HTTPSchemaModel):
    user: UserRead
