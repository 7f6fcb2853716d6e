"""
User profile and administration service.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.user import ProfileUpdate
from core.decorators import critical_database_operation, log_database_operation
from core.exceptions import NotFoundError, ValidationError
from crud.user_crud import UserCRUD
from db import User

logger = logging.getLogger(__name__)


class UserService:
    """Service for profile self-service and admin user management."""

    @staticmethod
    async def get_user(db: AsyncSession, user_id: UUID) -> User:
        user = await UserCRUD.find_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    @critical_database_operation("update profile")
    async def update_profile(db: AsyncSession, user_id: UUID, data: ProfileUpdate) -> User:
        """
        Apply a partial profile update.

        When first or last name changes and no display name is supplied, the
        display name is re-derived from the new names.
        """
        user = await UserService.get_user(db, user_id)
        changes = data.model_dump(exclude_unset=True)

        for field, value in changes.items():
            setattr(user, field, value.strip() if isinstance(value, str) else value)

        names_changed = "first_name" in changes or "last_name" in changes
        if names_changed and "display_name" not in changes:
            user.display_name = ""

        user = await UserCRUD.save_user(db, user)
        logger.info(f"Profile updated for user {user.id}: {sorted(changes)}")
        return user

    @staticmethod
    @critical_database_operation("delete account")
    async def delete_account(db: AsyncSession, user_id: UUID) -> None:
        """Hard-delete the caller's own account."""
        if not await UserCRUD.delete(db, id_value=user_id):
            raise NotFoundError("User not found")
        logger.info(f"Account deleted by owner: {user_id}")

    @staticmethod
    @log_database_operation("user listing", level="debug")
    async def list_users(
        db: AsyncSession, page: int = 1, per_page: int = 50
    ) -> Tuple[List[User], int]:
        return await UserCRUD.find_paginated(
            db, page=page, per_page=per_page, order_by=User.created_at.desc()
        )

    @staticmethod
    @critical_database_operation("admin delete user")
    async def delete_user(db: AsyncSession, actor_id: UUID, user_id: UUID) -> None:
        """
        Hard-delete another user's account.

        Raises:
            ValidationError: If an admin targets their own account
            NotFoundError: If the user does not exist
        """
        if actor_id == user_id:
            raise ValidationError("You cannot delete your own account from the admin panel")
        if not await UserCRUD.delete(db, id_value=user_id):
            raise NotFoundError("User not found")
        logger.warning(f"User {user_id} deleted by admin {actor_id}")

    @staticmethod
    @critical_database_operation("set user active")
    async def set_active(
        db: AsyncSession, actor_id: UUID, user_id: UUID, is_active: bool
    ) -> User:
        """
        Activate or deactivate an account.

        Deactivated users are refused at login and by the access check on
        their next request.
        """
        if actor_id == user_id and not is_active:
            raise ValidationError("You cannot deactivate your own account")

        user = await UserService.get_user(db, user_id)
        user.is_active = is_active
        user = await UserCRUD.save_user(db, user)
        logger.warning(
            f"User {user_id} {'activated' if is_active else 'deactivated'} by admin {actor_id}"
        )
        return user
