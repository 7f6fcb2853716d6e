"""
Maintenance ticket endpoints.

Listing is public; every change requires a signed-in user.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import ApiResponse
from api.schemas.maintenance import MaintenanceCreate, MaintenanceRead, MaintenanceUpdate
from api.services.maintenance_service import MaintenanceService
from core.database import get_session
from core.dependencies import CurrentUser, get_current_user
from db import MaintenanceStatus

router = APIRouter()


@router.get("", response_model=ApiResponse[List[MaintenanceRead]])
async def list_maintenance(
    status_filter: Optional[MaintenanceStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_session),
):
    """List tickets, latest scheduled date first, optionally filtered by status."""
    tickets = await MaintenanceService.list_tickets(db, status_filter)
    return ApiResponse(data=[MaintenanceRead.model_validate(t) for t in tickets])


@router.post("", response_model=ApiResponse[MaintenanceRead], status_code=status.HTTP_201_CREATED)
async def create_maintenance(
    data: MaintenanceCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    ticket = await MaintenanceService.create_ticket(db, data, created_by=current_user.id)
    return ApiResponse(message="Maintenance scheduled", data=MaintenanceRead.model_validate(ticket))


@router.put("/{ticket_id}", response_model=ApiResponse[MaintenanceRead])
async def update_maintenance(
    ticket_id: UUID,
    data: MaintenanceUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    ticket = await MaintenanceService.update_ticket(db, ticket_id, data)
    return ApiResponse(message="Maintenance updated", data=MaintenanceRead.model_validate(ticket))


@router.delete("/{ticket_id}", response_model=ApiResponse[None])
async def delete_maintenance(
    ticket_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await MaintenanceService.delete_ticket(db, ticket_id)
    return ApiResponse(message="Maintenance deleted")


@router.post("/{ticket_id}/resolve", response_model=ApiResponse[MaintenanceRead])
async def resolve_maintenance(
    ticket_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    ticket = await MaintenanceService.resolve_ticket(db, ticket_id)
    return ApiResponse(message="Maintenance resolved", data=MaintenanceRead.model_validate(ticket))
