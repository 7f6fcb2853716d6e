"""
User endpoints: profile self-service and admin user management.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import ProfileData, UserRead
from api.schemas.common import ApiResponse
from api.schemas.user import ProfileUpdate, UserActiveUpdate
from api.services.user_service import UserService
from core.database import get_session
from core.dependencies import CurrentUser, get_current_user, require_admin

router = APIRouter()


@router.get("/profile", response_model=ApiResponse[ProfileData])
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await UserService.get_user(db, current_user.id)
    return ApiResponse(data=ProfileData(user=UserRead.model_validate(user)))


@router.put("/profile", response_model=ApiResponse[ProfileData])
async def update_profile(
    data: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await UserService.update_profile(db, current_user.id, data)
    return ApiResponse(
        message="Profile updated successfully",
        data=ProfileData(user=UserRead.model_validate(user)),
    )


@router.delete("/account", response_model=ApiResponse[None])
async def delete_account(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Permanently delete the caller's account."""
    await UserService.delete_account(db, current_user.id)
    return ApiResponse(message="Account deleted successfully")


# ------------------------------------------------------------------------------
# Admin
# ------------------------------------------------------------------------------


@router.get("", response_model=ApiResponse[List[UserRead]])
async def list_users(
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """List all users, newest first. Total count is returned in X-Total-Count."""
    users, total = await UserService.list_users(db, page=page, per_page=per_page)

    response.headers["X-Total-Count"] = str(total)
    response.headers["X-Page"] = str(page)
    response.headers["X-Per-Page"] = str(per_page)

    return ApiResponse(data=[UserRead.model_validate(u) for u in users])


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    await UserService.delete_user(db, admin.id, user_id)
    return ApiResponse(message="User deleted successfully")


@router.put("/{user_id}/active", response_model=ApiResponse[UserRead])
async def set_user_active(
    user_id: UUID,
    data: UserActiveUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    user = await UserService.set_active(db, admin.id, user_id, data.is_active)
    return ApiResponse(
        message=f"User {'activated' if user.is_active else 'deactivated'} successfully",
        data=UserRead.model_validate(user),
    )
