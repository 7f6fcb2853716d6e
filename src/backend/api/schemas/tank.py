"""
Tank telemetry and alert schemas.
"""

from datetime import datetime
from typing import Optional

from core.schema_base import HTTPSchemaModel, RequestSchemaModel


class TankReadingCreate(RequestSchemaModel):
    """
    Reading posted by the tank controller.

    Every field is optional; missing values fall back to defaults when the
    reading is stored. Values are not range-checked.
    """

    # Free text: firmware revisions report labels outside TankStatus and
    # readings are stored as sent
    status: Optional[str] = None
    level: Optional[float] = None
    temperature: Optional[float] = None
    battery_level: Optional[float] = None
    alert: Optional[str] = None
    # Device clock; informational only, the server timestamp is authoritative
    timestamp: Optional[str] = None


class TankReadingRead(HTTPSchemaModel):
    id: Optional[int] = None
    status: str
    level: float
    temperature: float
    battery_level: float
    alert: str
    created_at: Optional[datetime] = None


class AlertRead(HTTPSchemaModel):
    title: str
    machine: str
    location: str
    time: Optional[datetime] = None
    status: str
    type: str
    details: str
