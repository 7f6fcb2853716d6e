"""
Tank telemetry service.

Stores readings posted by the tank controller and derives the current alert
set from the most recent one. Alerts are never stored: a condition that has
cleared on the latest reading produces no alert.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.tank import AlertRead, TankReadingCreate
from core.config import TelemetrySettings, settings
from core.decorators import critical_database_operation, log_database_operation
from core.logging_config import DeviceLogger
from core.metrics import track_reading
from crud.tank_reading_crud import TankReadingCRUD
from db import TankAlert, TankReading, TankStatus

logger = logging.getLogger(__name__)
device_logger = DeviceLogger("telemetry")

ALERT_STATUS = "Critical"


def default_reading() -> TankReading:
    """Reading reported when nothing has been stored yet."""
    return TankReading(
        status=TankStatus.UNKNOWN.value,
        level=0,
        temperature=0,
        battery_level=100,
        alert=TankAlert.NORMAL.value,
        created_at=None,
    )


def _fmt(value: float) -> str:
    return f"{value:g}"


def is_overheating(reading: TankReading, config: TelemetrySettings) -> bool:
    return reading.alert == TankAlert.OVERHEATING.value or reading.temperature > config.overheat_threshold


def is_full(reading: TankReading, config: TelemetrySettings) -> bool:
    return reading.status == TankStatus.FULL.value or reading.level >= config.full_level_threshold


def derive_alerts(
    reading: Optional[TankReading], config: Optional[TelemetrySettings] = None
) -> List[AlertRead]:
    """
    Evaluate a single reading against the overheating and tank-full conditions.

    Returns zero, one or two alerts, overheating first.
    """
    if reading is None:
        return []

    config = config or settings.telemetry
    alerts = []

    if is_overheating(reading, config):
        alerts.append(
            AlertRead(
                title="Overheating Alert",
                machine=config.machine_id,
                location=config.location,
                time=reading.created_at,
                status=ALERT_STATUS,
                type="temperature",
                details=f"Temperature: {_fmt(reading.temperature)}°C",
            )
        )

    if is_full(reading, config):
        alerts.append(
            AlertRead(
                title="Tank Full",
                machine=config.machine_id,
                location=config.location,
                time=reading.created_at,
                status=ALERT_STATUS,
                type="tank",
                details=f"Level: {_fmt(reading.level)}%",
            )
        )

    return alerts


class TankService:
    """Service for telemetry ingestion and queries."""

    @staticmethod
    @critical_database_operation("record tank reading")
    async def record_reading(db: AsyncSession, data: TankReadingCreate) -> TankReading:
        """
        Store a reading. Missing numbers default to 0, missing status to
        "Unknown" and missing alert to "normal". Values are not range-checked.
        """
        reading = TankReading(
            status=data.status or TankStatus.UNKNOWN.value,
            level=data.level or 0,
            temperature=data.temperature or 0,
            battery_level=data.battery_level or 0,
            alert=data.alert or TankAlert.NORMAL.value,
        )
        reading = await TankReadingCRUD.save(db, reading)

        device_logger.reading_recorded(
            reading.status, reading.level, reading.temperature, reading.battery_level, reading.alert
        )
        track_reading(reading.status, reading.level, reading.temperature)

        for alert in derive_alerts(reading):
            device_logger.alert_condition(alert.type, alert.details)

        return reading

    @staticmethod
    async def latest(db: AsyncSession) -> TankReading:
        """Newest reading, or the default reading if none exist."""
        return await TankReadingCRUD.latest(db) or default_reading()

    @staticmethod
    @log_database_operation("tank history retrieval", level="debug")
    async def history(db: AsyncSession, limit: Optional[int] = None) -> List[TankReading]:
        """Newest-first readings, at most `limit` of them."""
        return await TankReadingCRUD.history(db, limit or settings.telemetry.history_limit)

    @staticmethod
    async def current_alerts(db: AsyncSession) -> List[AlertRead]:
        """Alerts for the latest stored reading; empty when there is none."""
        return derive_alerts(await TankReadingCRUD.latest(db))
