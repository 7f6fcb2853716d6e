"""
Authentication service.

Handles the account lifecycle: registration, password and Google login,
email verification and password reset.

Account states:
    Unregistered -> PendingVerification -> Verified (Active | Inactive)
with a password-reset request tracked independently of verification.
"""

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import RegisterRequest
from api.services.email_service import EmailService
from api.services.google_auth import GoogleIdentity, GoogleTokenVerifier
from core.config import settings
from core.decorators import critical_database_operation
from core.exceptions import (
    AccountInactiveError,
    AlreadyVerifiedError,
    DuplicateEmailError,
    EmailNotVerifiedError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    ValidationError,
)
from core.logging_config import AuthLogger
from core.metrics import registrations_total, track_auth_attempt
from core.security import (
    SecurityError,
    create_access_token,
    decode_token,
    generate_one_time_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)
from crud.user_crud import UserCRUD, normalize_email
from db import User, utcnow

logger = logging.getLogger(__name__)
auth_logger = AuthLogger()

GOOGLE_PASSWORD_PREFIX = "google:"
FEDERATED_REQUIRED_FIELDS = ("email", "password_hash", "first_name")


def _check_password_length(password: str) -> None:
    minimum = settings.security.min_password_length
    if len(password) < minimum:
        raise ValidationError(f"Password must be at least {minimum} characters long")


class AuthenticationService:
    """Service for handling authentication operations."""

    def __init__(
        self,
        email_service: Optional[EmailService] = None,
        google_verifier: Optional[GoogleTokenVerifier] = None,
    ):
        self.email_service = email_service or EmailService()
        self.google_verifier = google_verifier

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    @critical_database_operation("register user")
    async def register(self, db: AsyncSession, data: RegisterRequest) -> Tuple[User, str]:
        """Create an unverified account and return it with a usable session token.

        The verification email is best-effort: a delivery failure is logged
        and the registration still succeeds.

        Raises:
            ValidationError: If the password is too short
            DuplicateEmailError: If the email is already registered
        """
        _check_password_length(data.password)

        # Fast path only; the unique index decides under concurrency
        if await UserCRUD.find_by_email(db, data.email):
            raise DuplicateEmailError()

        verification_token = generate_one_time_token()
        user = await UserCRUD.create_user(
            db,
            {
                "email": data.email,
                "password_hash": hash_password(data.password),
                "first_name": data.first_name.strip(),
                "last_name": data.last_name.strip(),
                "is_email_verified": False,
                "email_verification_token": verification_token,
                "email_verification_expires": utcnow()
                + timedelta(hours=settings.security.verification_token_hours),
            },
        )

        registrations_total.inc()
        auth_logger.user_registered(user.id, user.email)

        await self._best_effort(
            "send verification email",
            user.email,
            self.email_service.send_verification_email,
            user.email,
            user.display_name,
            verification_token,
        )

        return user, create_access_token(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """Authenticate with email and password.

        Unknown email and wrong password produce the same error.

        Raises:
            InvalidCredentialsError: If the credentials do not match
            AccountInactiveError: If the account has been deactivated
            EmailNotVerifiedError: If the email has not been verified yet
        """
        user = await UserCRUD.find_by_email(db, email)

        if not user or not verify_password(password, user.password_hash):
            track_auth_attempt("password", "invalid_credentials")
            auth_logger.login_failed(normalize_email(email), "invalid credentials")
            raise InvalidCredentialsError()

        if not user.is_active:
            track_auth_attempt("password", "inactive")
            auth_logger.login_failed(user.email, "account inactive")
            raise AccountInactiveError()

        if not user.is_email_verified:
            track_auth_attempt("password", "unverified")
            auth_logger.login_failed(user.email, "email not verified")
            raise EmailNotVerifiedError()

        track_auth_attempt("password", "success")
        auth_logger.login_succeeded(user.id, user.email)
        return user, create_access_token(user)

    @critical_database_operation("google login")
    async def google_login(self, db: AsyncSession, google_id_token: str) -> Tuple[User, str]:
        """Sign in with a Google ID token, creating the account on first sight.

        Repeat sign-ins backfill empty profile fields and can only upgrade
        the verification flag, never downgrade it.

        Raises:
            InvalidGoogleTokenError: If the token cannot be verified or has no email
            AccountInactiveError: If the matching account has been deactivated
        """
        verifier = self.google_verifier or GoogleTokenVerifier()
        try:
            identity = await verifier.verify(google_id_token)
        except Exception:
            track_auth_attempt("google", "invalid_token")
            raise

        user = await UserCRUD.find_by_email(db, identity.email)
        if user is None:
            try:
                user = await self._create_google_user(db, identity)
            except DuplicateEmailError:
                # A concurrent sign-in created the account first
                user = await UserCRUD.find_by_email(db, identity.email)
                if user is None:
                    raise
        else:
            user = await self._merge_google_identity(db, user, identity)

        if not user.is_active:
            track_auth_attempt("google", "inactive")
            auth_logger.login_failed(user.email, "account inactive")
            raise AccountInactiveError()

        track_auth_attempt("google", "success")
        auth_logger.login_succeeded(user.id, user.email, method="google")
        return user, create_access_token(user)

    async def _create_google_user(self, db: AsyncSession, identity: GoogleIdentity) -> User:
        first_name, last_name = _names_from_identity(identity)
        user = await UserCRUD.create_user(
            db,
            {
                "email": identity.email,
                # Never a valid bcrypt hash, so password login cannot match it
                "password_hash": f"{GOOGLE_PASSWORD_PREFIX}{identity.sub}",
                "first_name": first_name,
                "last_name": last_name,
                "display_name": identity.name or "",
                "profile_picture": identity.picture,
                "is_email_verified": identity.email_verified,
            },
            required=FEDERATED_REQUIRED_FIELDS,
        )
        auth_logger.google_user_created(user.id, user.email)
        return user

    async def _merge_google_identity(
        self, db: AsyncSession, user: User, identity: GoogleIdentity
    ) -> User:
        first_name, last_name = _names_from_identity(identity)
        changed = False

        backfill = {
            "first_name": first_name,
            "last_name": last_name,
            "display_name": identity.name,
            "profile_picture": identity.picture,
        }
        for field, value in backfill.items():
            if value and not getattr(user, field):
                setattr(user, field, value)
                changed = True

        if identity.email_verified and not user.is_email_verified:
            user.is_email_verified = True
            user.email_verification_token = None
            user.email_verification_expires = None
            changed = True

        if changed:
            user = await UserCRUD.save_user(db, user)
        return user

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    @critical_database_operation("verify email")
    async def verify_email(self, db: AsyncSession, token: str) -> User:
        """Consume a verification token.

        Raises:
            InvalidOrExpiredTokenError: If no user holds this token unexpired
        """
        user = await UserCRUD.find_by_verification_token(db, token)
        if not user:
            raise InvalidOrExpiredTokenError("Invalid or expired verification link")

        user.is_email_verified = True
        user.email_verification_token = None
        user.email_verification_expires = None
        user = await UserCRUD.save_user(db, user)

        auth_logger.email_verified(user.id, user.email)
        return user

    @critical_database_operation("resend verification")
    async def resend_verification(self, db: AsyncSession, email: str) -> None:
        """Rotate the verification token and send it again.

        Raises:
            NotFoundError: If no account uses this email
            AlreadyVerifiedError: If the account is already verified
            UpstreamError: If the email cannot be sent
        """
        user = await UserCRUD.find_by_email(db, email)
        if not user:
            raise NotFoundError("User not found")
        if user.is_email_verified:
            raise AlreadyVerifiedError()

        token = generate_one_time_token()
        user.email_verification_token = token
        user.email_verification_expires = utcnow() + timedelta(
            hours=settings.security.verification_token_hours
        )
        user = await UserCRUD.save_user(db, user)

        await self.email_service.send_verification_email(user.email, user.display_name, token)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    @critical_database_operation("request password reset")
    async def request_password_reset(self, db: AsyncSession, email: str) -> None:
        """Issue a reset token if the account exists.

        The caller always answers with the same generic message, and delivery
        failures are logged only, so the outcome never reveals whether the
        email is registered.
        """
        user = await UserCRUD.find_by_email(db, email)
        auth_logger.password_reset_requested(normalize_email(email), user is not None)
        if not user:
            return

        token = generate_one_time_token()
        user.password_reset_token = token
        user.password_reset_expires = utcnow() + timedelta(
            minutes=settings.security.reset_token_minutes
        )
        user = await UserCRUD.save_user(db, user)

        await self._best_effort(
            "send password reset email",
            user.email,
            self.email_service.send_password_reset_email,
            user.email,
            user.display_name,
            token,
        )

    async def check_reset_token(self, db: AsyncSession, token: str) -> bool:
        """Return True if the reset token is currently redeemable."""
        return await UserCRUD.find_by_reset_token(db, token) is not None

    @critical_database_operation("reset password")
    async def reset_password(self, db: AsyncSession, token: str, new_password: str) -> User:
        """Replace the password using a reset token.

        Raises:
            ValidationError: If the new password is too short
            InvalidOrExpiredTokenError: If no user holds this token unexpired
        """
        _check_password_length(new_password)

        user = await UserCRUD.find_by_reset_token(db, token)
        if not user:
            raise InvalidOrExpiredTokenError()

        user.password_hash = hash_password(new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        user = await UserCRUD.save_user(db, user)

        auth_logger.password_reset_completed(user.id, user.email)
        return user

    # ------------------------------------------------------------------
    # Session tokens
    # ------------------------------------------------------------------

    async def inspect_token(self, db: AsyncSession, token: str) -> Tuple[User, Dict[str, Any]]:
        """Validate a session token and load its user.

        Raises:
            ForbiddenError: If the token is invalid or expired
            NotFoundError: If the user no longer exists
        """
        try:
            payload = decode_token(token)
            user_id = get_user_id_from_token(payload)
        except SecurityError as e:
            raise ForbiddenError(error=str(e))

        user = await UserCRUD.find_by_id(db, _parse_uuid(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user, payload

    # ------------------------------------------------------------------

    async def _best_effort(
        self,
        operation: str,
        email: str,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> None:
        """Run a side effect whose failure must not fail the primary operation."""
        try:
            await func(*args)
        except Exception as e:
            auth_logger.side_effect_failed(operation, email, str(e))


def _names_from_identity(identity: GoogleIdentity) -> Tuple[str, str]:
    first_name = identity.given_name or ""
    last_name = identity.family_name or ""
    if not first_name and identity.name:
        first_name, _, rest = identity.name.partition(" ")
        last_name = last_name or rest
    if not first_name:
        first_name = identity.email.split("@", 1)[0]
    return first_name, last_name


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ForbiddenError(error="Malformed user id in token")
