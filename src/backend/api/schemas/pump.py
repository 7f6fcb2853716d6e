"""
Pump (smart plug) control schemas.
"""

from typing import Any, Dict, Optional, Union

from core.schema_base import HTTPSchemaModel, RequestSchemaModel
from db.enums import PumpState


class PumpCommandRequest(RequestSchemaModel):
    """Unified control body: ON/1, OFF/0 or TOGGLE (case-insensitive)."""

    command: Optional[Union[str, int]] = None


class PumpStateData(HTTPSchemaModel):
    state: PumpState


class DeviceInfo(HTTPSchemaModel):
    nickname: Optional[str] = None
    model: Optional[str] = None
    signal_level: Optional[int] = None
    on_time: Optional[int] = None


class PumpStatusData(HTTPSchemaModel):
    status: PumpState
    device: DeviceInfo


class EnergyData(HTTPSchemaModel):
    energy: Dict[str, Any]
