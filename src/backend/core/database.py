"""
Database configuration.
Implements connection pooling, async sessions and startup retry.
"""

import asyncio
import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, PendingRollbackError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool
from sqlmodel import SQLModel

from .config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Build engine keyword arguments for the configured backend."""
    options = {
        "echo": settings.database.echo,
        "future": True,
    }
    if settings.database.is_postgres:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_timeout=settings.database.pool_timeout,
            pool_recycle=settings.database.pool_recycle,
            poolclass=AsyncAdaptedQueuePool,
            connect_args={
                "server_settings": {
                    "application_name": settings.api.app_name,
                },
                "command_timeout": settings.database.command_timeout,
                "timeout": settings.database.connect_timeout,
            },
        )
    return options


engine: AsyncEngine = create_async_engine(settings.database.url, **_engine_options())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Prevent additional queries after commit
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.
    Commits on success, rolls back on any exception.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            if session.in_transaction():
                try:
                    await session.commit()
                except PendingRollbackError:
                    await session.rollback()
                    raise
        except Exception:
            await session.rollback()
            raise


async def wait_for_database(
    db_engine: AsyncEngine = engine,
    retries: int = settings.database.connect_retries,
    backoff: float = settings.database.retry_backoff_seconds,
) -> None:
    """
    Block until the database answers a trivial query.

    Makes `retries` attempts with a fixed `backoff` pause between them.

    Raises:
        OperationalError: If the database is still unreachable after the last attempt
    """
    for attempt in range(1, retries + 1):
        try:
            async with db_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info(f"Database reachable (attempt {attempt}/{retries})")
            return
        except (OperationalError, OSError) as e:
            if attempt == retries:
                logger.error(f"Database unreachable after {retries} attempts: {e}")
                raise
            logger.warning(
                f"Database connection attempt {attempt}/{retries} failed: {e}. "
                f"Retrying in {backoff}s"
            )
            await asyncio.sleep(backoff)


async def init_db() -> None:
    """
    Initialize database tables.
    Should be called on application startup; safe to run against an
    already-initialized database.
    """
    # Import models so they register on SQLModel.metadata
    import db.models  # noqa: F401

    await wait_for_database()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def check_database() -> bool:
    """Return True when the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


async def close_db() -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
