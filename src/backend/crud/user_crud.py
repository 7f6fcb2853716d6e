"""
User CRUD for database operations.

Handles all database queries related to users (the credential store).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateEmailError, ValidationError
from crud.base_repository import BaseCRUD
from db import User, utcnow

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = ("email", "password_hash", "first_name", "last_name")


def normalize_email(email: str) -> str:
    """Case-fold and trim an email address for storage and lookup."""
    return email.strip().lower()


def is_duplicate_email(exc: IntegrityError) -> bool:
    """True when the violation is the unique email index (SQLite or PostgreSQL wording)."""
    message = str(exc.orig).lower()
    return "email" in message and ("unique" in message or "duplicate" in message)


class UserCRUD(BaseCRUD[User]):
    """CRUD for User database operations."""

    model = User

    @classmethod
    async def find_by_email(
        cls, db: AsyncSession, email: str
    ) -> Optional[User]:
        """
        Find user by email (case-insensitive exact match).

        Args:
            db: Database session
            email: Email to search for

        Returns:
            User or None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @classmethod
    async def find_by_verification_token(
        cls, db: AsyncSession, token: str, now: Optional[datetime] = None
    ) -> Optional[User]:
        """Find the user holding an unexpired email verification token."""
        now = now or utcnow()
        stmt = select(User).where(
            User.email_verification_token == token,
            User.email_verification_expires > now,
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @classmethod
    async def find_by_reset_token(
        cls, db: AsyncSession, token: str, now: Optional[datetime] = None
    ) -> Optional[User]:
        """Find the user holding an unexpired password reset token."""
        now = now or utcnow()
        stmt = select(User).where(
            User.password_reset_token == token,
            User.password_reset_expires > now,
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @classmethod
    async def create_user(
        cls,
        db: AsyncSession,
        fields: Dict[str, Any],
        required: Sequence[str] = REQUIRED_USER_FIELDS,
    ) -> User:
        """
        Create a user record.

        The unique index on email is the authoritative duplicate check; a
        violation surfaces as DuplicateEmailError regardless of any pre-check
        done by the caller.

        Args:
            db: Database session
            fields: Column values for the new user
            required: Fields that must be present and non-empty. Federated
                sign-ins may not supply a last name.

        Raises:
            ValidationError: If a required field is missing
            DuplicateEmailError: If the email is already registered
        """
        missing = [name for name in required if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        user = User(**{**fields, "email": normalize_email(fields["email"])})
        user.refresh_display_name()

        try:
            return await cls.save(db, user)
        except IntegrityError as exc:
            await db.rollback()
            if not is_duplicate_email(exc):
                raise
            logger.info(f"Duplicate registration rejected for {user.email}")
            raise DuplicateEmailError()

    @classmethod
    async def save_user(cls, db: AsyncSession, user: User) -> User:
        """Persist a loaded user, deriving display_name and bumping updated_at."""
        user.email = normalize_email(user.email)
        user.refresh_display_name()
        user.updated_at = utcnow()
        try:
            return await cls.save(db, user)
        except IntegrityError as exc:
            await db.rollback()
            if not is_duplicate_email(exc):
                raise
            raise DuplicateEmailError()
