"""
Base schema models for API requests and responses.

Provides automatic camelCase conversion for the mobile and web clients,
consistent datetime serialization with UTC timezone indicator,
and common configuration for all Pydantic schemas.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer


def to_camel(string: str) -> str:
    """
    Convert snake_case to camelCase.

    Example:
        >>> to_camel("battery_level")
        'batteryLevel'
    """
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


def serialize_datetime(dt: datetime | None) -> str | None:
    """
    Serialize datetime to ISO 8601 format with UTC timezone indicator.

    All datetimes in the database are stored as naive UTC. Aware values are
    converted to UTC first.

    Returns:
        ISO 8601 string with 'Z' suffix (e.g., "2025-12-18T14:30:00Z")
        or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)

    return dt.isoformat() + "Z"


class HTTPSchemaModel(BaseModel):
    """
    Base model for all HTTP API schemas.

    Provides:
    - Automatic camelCase conversion for field names
    - Support for both snake_case and camelCase input
    - Automatic conversion from ORM models (from_attributes=True)
    - Consistent datetime serialization with UTC timezone indicator ('Z' suffix)
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_serializer("*", mode="wrap")
    @classmethod
    def serialize_any_datetime(cls, value: Any, handler: Any) -> Any:
        """Serialize datetimes with the 'Z' suffix; delegate everything else."""
        if isinstance(value, datetime):
            return serialize_datetime(value)
        return handler(value)


class RequestSchemaModel(HTTPSchemaModel):
    """Base model for request bodies. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


def to_naive_utc(dt: datetime | None) -> datetime | None:
    """Normalize an incoming datetime to naive UTC for storage."""
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def reject_null(value: Any) -> Any:
    """Field validator for optional update fields backed by NOT NULL columns.

    Omitting the field leaves it unchanged; sending an explicit null is an error.
    """
    if value is None:
        raise ValueError("may be omitted but not null")
    return value
