"""
Tank reading CRUD for database operations.

Readings are append-only; there is no update or delete path.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from crud.base_repository import BaseCRUD
from db import TankReading

# id breaks ties between readings stored within the same clock tick
NEWEST_FIRST = (TankReading.created_at.desc(), TankReading.id.desc())


class TankReadingCRUD(BaseCRUD[TankReading]):
    """CRUD for TankReading database operations."""

    model = TankReading

    @classmethod
    async def latest(cls, db: AsyncSession) -> Optional[TankReading]:
        """Most recent reading by creation order, or None if the store is empty."""
        readings = await cls.find_all(db, order_by=NEWEST_FIRST, limit=1)
        return readings[0] if readings else None

    @classmethod
    async def history(cls, db: AsyncSession, limit: int) -> List[TankReading]:
        """Most recent `limit` readings, newest first."""
        return await cls.find_all(db, order_by=NEWEST_FIRST, limit=limit)
