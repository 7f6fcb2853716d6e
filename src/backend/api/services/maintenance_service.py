"""
Maintenance ticket service.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate
from core.decorators import critical_database_operation, log_database_operation
from core.exceptions import NotFoundError
from crud.maintenance_crud import MaintenanceCRUD
from db import MaintenanceStatus, MaintenanceTicket, utcnow

logger = logging.getLogger(__name__)


class MaintenanceService:
    """Service for scheduling and resolving maintenance tickets."""

    @staticmethod
    @log_database_operation("maintenance ticket listing", level="debug")
    async def list_tickets(
        db: AsyncSession, status: Optional[MaintenanceStatus] = None
    ) -> List[MaintenanceTicket]:
        return await MaintenanceCRUD.list_tickets(db, status.value if status else None)

    @staticmethod
    async def get_ticket(db: AsyncSession, ticket_id: UUID) -> MaintenanceTicket:
        ticket = await MaintenanceCRUD.find_by_id(db, ticket_id)
        if not ticket:
            raise NotFoundError("Maintenance record not found")
        return ticket

    @staticmethod
    @critical_database_operation("create maintenance ticket")
    async def create_ticket(
        db: AsyncSession, data: MaintenanceCreate, created_by: Optional[UUID] = None
    ) -> MaintenanceTicket:
        ticket = MaintenanceTicket(
            title=data.title.strip(),
            machine_id=data.machine_id.strip(),
            location=data.location,
            scheduled_date=data.scheduled_date,
            priority=data.priority.value,
            status=MaintenanceStatus.SCHEDULED.value,
            created_by=created_by,
        )
        ticket = await MaintenanceCRUD.save(db, ticket)
        logger.info(f"Maintenance ticket {ticket.id} created for {ticket.machine_id}")
        return ticket

    @staticmethod
    @critical_database_operation("update maintenance ticket")
    async def update_ticket(
        db: AsyncSession, ticket_id: UUID, data: MaintenanceUpdate
    ) -> MaintenanceTicket:
        ticket = await MaintenanceService.get_ticket(db, ticket_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if hasattr(value, "value"):
                value = value.value
            setattr(ticket, field, value)
        ticket.updated_at = utcnow()

        return await MaintenanceCRUD.save(db, ticket)

    @staticmethod
    @critical_database_operation("delete maintenance ticket")
    async def delete_ticket(db: AsyncSession, ticket_id: UUID) -> None:
        if not await MaintenanceCRUD.delete(db, id_value=ticket_id):
            raise NotFoundError("Maintenance record not found")
        logger.info(f"Maintenance ticket {ticket_id} deleted")

    @staticmethod
    @critical_database_operation("resolve maintenance ticket")
    async def resolve_ticket(db: AsyncSession, ticket_id: UUID) -> MaintenanceTicket:
        ticket = await MaintenanceService.get_ticket(db, ticket_id)
        ticket.status = MaintenanceStatus.RESOLVED.value
        ticket.updated_at = utcnow()
        ticket = await MaintenanceCRUD.save(db, ticket)
        logger.info(f"Maintenance ticket {ticket_id} resolved")
        return ticket
