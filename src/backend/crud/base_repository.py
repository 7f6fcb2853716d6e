"""
Shared query helpers for the table-specific CRUD classes.

Every method is a classmethod taking the request's AsyncSession; subclasses
only set ``model``. Writes commit immediately since each API call touches a
single row.
"""
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseCRUD(Generic[ModelType]):
    """
    Generic lookups and writes keyed on ``model.id``.

    Usage:
        class MaintenanceCRUD(BaseCRUD[Maintenance]):
            model = Maintenance
    """

    model: Type[ModelType] = None

    @classmethod
    def _apply_filters(cls, stmt, filters: Optional[Dict[str, Any]]):
        # Unset query parameters arrive as None and mean "any"
        for field, value in (filters or {}).items():
            if value is not None:
                stmt = stmt.where(getattr(cls.model, field) == value)
        return stmt

    @staticmethod
    def _apply_order(stmt, order_by: Optional[Any]):
        if order_by is None:
            return stmt
        if isinstance(order_by, (list, tuple)):
            return stmt.order_by(*order_by)
        return stmt.order_by(order_by)

    @classmethod
    async def find_by_id(cls, db: AsyncSession, id_value: Any) -> Optional[ModelType]:
        """Primary-key lookup; None when the row does not exist."""
        result = await db.execute(select(cls.model).where(cls.model.id == id_value))
        return result.scalar_one_or_none()

    @classmethod
    async def find_all(
        cls,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Rows matching ``filters`` in ``order_by`` order.

        Args:
            db: Database session
            filters: Column name to value; None values are skipped
            order_by: A column expression or a tuple of them
            limit: Cap on the number of rows returned
        """
        stmt = cls._apply_order(cls._apply_filters(select(cls.model), filters), order_by)
        if limit:
            stmt = stmt.limit(limit)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    async def find_paginated(
        cls,
        db: AsyncSession,
        *,
        page: int = 1,
        per_page: int = 50,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
    ) -> Tuple[List[ModelType], int]:
        """One page of rows plus the total matching count."""
        count_stmt = cls._apply_filters(select(func.count()).select_from(cls.model), filters)
        total = (await db.execute(count_stmt)).scalar() or 0

        stmt = cls._apply_order(cls._apply_filters(select(cls.model), filters), order_by)
        stmt = stmt.offset((page - 1) * per_page).limit(per_page)
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    @classmethod
    async def save(cls, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """Insert or update ``db_obj``, commit, and return it refreshed."""
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    @classmethod
    async def delete(cls, db: AsyncSession, *, id_value: Any) -> bool:
        """Remove the row. False when nothing had that id."""
        db_obj = await cls.find_by_id(db, id_value)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.commit()
        return True
