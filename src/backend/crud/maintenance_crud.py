"""
Maintenance ticket CRUD for database operations.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from crud.base_repository import BaseCRUD
from db import MaintenanceTicket


class MaintenanceCRUD(BaseCRUD[MaintenanceTicket]):
    """CRUD for MaintenanceTicket database operations."""

    model = MaintenanceTicket

    @classmethod
    async def list_tickets(
        cls, db: AsyncSession, status: Optional[str] = None
    ) -> List[MaintenanceTicket]:
        """List tickets, optionally filtered by status, latest scheduled date first."""
        return await cls.find_all(
            db,
            filters={"status": status},
            order_by=(
                MaintenanceTicket.scheduled_date.desc().nulls_last(),
                MaintenanceTicket.created_at.desc(),
            ),
        )
