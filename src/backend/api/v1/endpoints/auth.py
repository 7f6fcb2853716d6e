"""
Authentication endpoints.

Email/password and Google sign-in, email verification, password reset and
session token inspection. Session tokens are stateless, so logout is
acknowledged only; the client discards its token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import (
    AuthData,
    EmailRequest,
    GoogleLoginRequest,
    LoginRequest,
    ProfileData,
    RegisterRequest,
    ResetPasswordRequest,
    TokenInfo,
    TokenVerifyData,
    UserRead,
)
from api.schemas.common import ApiResponse
from api.services import pages
from api.services.auth_service import AuthenticationService
from api.services.user_service import UserService
from core.database import get_session
from core.dependencies import CurrentUser, get_auth_service, get_current_user, security
from core.exceptions import InvalidOrExpiredTokenError, UnauthenticatedError
from core.security import get_token_expiry

router = APIRouter()

PASSWORD_RESET_MESSAGE = "If the email exists, a password reset link will be sent"


def _auth_data(user, token: str) -> AuthData:
    return AuthData(user=UserRead.model_validate(user), token=token)


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Create an account. The returned token works immediately; login requires verification."""
    user, token = await auth_service.register(db, data)
    return ApiResponse(
        message="User registered successfully. Please check your email to verify your account.",
        data=_auth_data(user, token),
    )


@router.post("/login", response_model=ApiResponse[AuthData])
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    user, token = await auth_service.login(db, data.email, data.password)
    return ApiResponse(message="Login successful", data=_auth_data(user, token))


@router.post("/google", response_model=ApiResponse[AuthData])
async def google_login(
    data: GoogleLoginRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    user, token = await auth_service.google_login(db, data.id_token)
    return ApiResponse(message="Google login successful", data=_auth_data(user, token))


@router.post("/verify", response_model=ApiResponse[TokenVerifyData])
async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Validate a bearer token and describe it."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    user, payload = await auth_service.inspect_token(db, credentials.credentials)
    return ApiResponse(
        message="Token is valid",
        data=TokenVerifyData(
            user=UserRead.model_validate(user),
            token_info=TokenInfo(
                id=str(user.id),
                email=user.email,
                expires_at=get_token_expiry(payload),
            ),
        ),
    )


@router.get("/verify-email/{token}", response_class=HTMLResponse)
async def verify_email(
    token: str,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Landing page for the link in the verification email."""
    try:
        user = await auth_service.verify_email(db, token)
    except InvalidOrExpiredTokenError as e:
        return HTMLResponse(pages.verification_failure_page(e.message), status_code=e.status_code)
    return HTMLResponse(pages.verification_success_page(user.display_name or user.email))


@router.post("/resend-verification", response_model=ApiResponse[None])
async def resend_verification(
    data: EmailRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    await auth_service.resend_verification(db, data.email)
    return ApiResponse(message="Verification email sent. Please check your inbox.")


@router.post("/password-reset", response_model=ApiResponse[None])
async def request_password_reset(
    data: EmailRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Always answers the same way, whether or not the email is registered."""
    await auth_service.request_password_reset(db, data.email)
    return ApiResponse(message=PASSWORD_RESET_MESSAGE)


@router.get("/reset-password/{token}", response_class=HTMLResponse)
async def reset_password_page(
    token: str,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Landing page for the link in the password reset email."""
    if not await auth_service.check_reset_token(db, token):
        return HTMLResponse(pages.reset_link_invalid_page(), status_code=status.HTTP_400_BAD_REQUEST)
    return HTMLResponse(pages.reset_password_page(token))


@router.post("/reset-password", response_model=ApiResponse[None])
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    await auth_service.reset_password(db, data.token, data.new_password)
    return ApiResponse(message="Password has been reset successfully. You can now log in.")


@router.get("/profile", response_model=ApiResponse[ProfileData])
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await UserService.get_user(db, current_user.id)
    return ApiResponse(data=ProfileData(user=UserRead.model_validate(user)))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    return ApiResponse(message="Logout successful")
