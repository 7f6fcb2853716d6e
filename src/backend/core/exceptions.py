"""
Application error taxonomy.

Every error carries the HTTP status it maps to and the message returned in
the response envelope. Handlers registered in the app factory render these
as ``{"success": false, "message": ..., "data"?: ..., "error"?: ...}``.
"""

from typing import Any, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        data: Optional[Any] = None,
        error: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.data = data
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateEmailError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists with this email"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class AccountInactiveError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Account is inactive. Please contact support."


class EmailNotVerifiedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please verify your email before logging in"

    def __init__(self, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("data", {"requiresVerification": True})
        super().__init__(message, **kwargs)


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. No token provided."


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class InvalidOrExpiredTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or expired token"


class InvalidGoogleTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid Google token"


class AlreadyVerifiedError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email is already verified"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamError(AppError):
    """A dependency outside the process (SMTP, Google, smart plug) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service failure"


class AccountDisabledError(AccountInactiveError):
    """An inactive account presenting an otherwise valid session token."""

    status_code = status.HTTP_403_FORBIDDEN
