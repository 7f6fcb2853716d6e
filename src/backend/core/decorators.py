"""
Logging decorators for service methods that hit the database.

``critical_database_operation`` wraps writes (registration, tank readings,
maintenance tickets, account changes): a failing SQLAlchemy call is logged
with a severity that matches its cause and then re-raised, so the global
handler still answers with the 500 envelope. AppError subclasses are not
caught.

``log_database_operation`` traces read paths at a chosen level.
"""
import functools
import logging
from typing import Any, Callable

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins.
# (exception types, label, log level, transient)
_FAILURE_KINDS = (
    (IntegrityError, "integrity violation", logging.WARNING, False),
    ((ConnectionError, DisconnectionError), "lost connection", logging.ERROR, True),
    (TimeoutError, "pool timeout", logging.WARNING, True),
    (OperationalError, "operational error", logging.ERROR, True),
    (StatementError, "bad statement", logging.WARNING, False),
)


def classify_database_error(exc: Exception) -> tuple[str, int, bool]:
    """Return ``(label, log level, transient)`` for a database exception."""
    for types, label, level, transient in _FAILURE_KINDS:
        if isinstance(exc, types):
            return label, level, transient
    return "unexpected error", logging.ERROR, False


def critical_database_operation(operation: str) -> Callable:
    """
    Log database failures of an async service method, then re-raise.

    Usage:
        @critical_database_operation("create maintenance ticket")
        async def create_ticket(self, db, ...): ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except (SQLAlchemyError, ConnectionError) as exc:
                label, level, transient = classify_database_error(exc)
                detail = getattr(exc, "orig", None) or exc
                logger.log(
                    level,
                    f"{operation} failed ({label}, transient={transient}) in "
                    f"{func.__qualname__}: {detail}",
                    exc_info=level >= logging.ERROR,
                )
                raise

        return wrapper

    return decorator


def log_database_operation(operation: str, level: str = "debug") -> Callable:
    """
    Log when an async read starts, finishes or fails.

    Args:
        operation: Human-readable name, e.g. "tank history retrieval"
        level: Logger method name ('debug', 'info', ...)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            emit = getattr(logger, level)
            emit(f"{operation}: started")
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                emit(f"{operation}: failed with {type(exc).__name__}: {exc}")
                raise
            emit(f"{operation}: done")
            return result

        return wrapper

    return decorator
