"""
Unit tests for tank alert derivation and reading storage.
"""

from datetime import timedelta

import pytest

from api.schemas.tank import TankReadingCreate
from api.services.tank_service import TankService, default_reading, derive_alerts
from core.config import TelemetrySettings
from db import TankReading, utcnow
from tests.factories import TankReadingFactory


def _reading(**fields) -> TankReading:
    return TankReadingFactory.create(**fields)


class TestDeriveAlerts:
    """Tests for evaluating the overheating and tank-full conditions."""

    def test_full_tank_only(self):
        alerts = derive_alerts(_reading(status="Full", level=95, temperature=30))

        assert [a.type for a in alerts] == ["tank"]
        assert alerts[0].title == "Tank Full"
        assert alerts[0].details == "Level: 95%"
        assert alerts[0].status == "Critical"

    def test_overheating_only(self):
        alerts = derive_alerts(_reading(status="Normal", level=50, temperature=55))

        assert [a.type for a in alerts] == ["temperature"]
        assert alerts[0].title == "Overheating Alert"
        assert alerts[0].details == "Temperature: 55°C"

    def test_normal_reading_has_no_alerts(self):
        assert derive_alerts(_reading(status="Normal", level=50, temperature=30)) == []

    def test_both_conditions(self):
        alerts = derive_alerts(_reading(status="Normal", level=92.5, temperature=61))

        assert [a.type for a in alerts] == ["temperature", "tank"]
        assert alerts[1].details == "Level: 92.5%"

    def test_alert_tag_alone_triggers_overheating(self):
        alerts = derive_alerts(_reading(temperature=20, alert="overheating"))

        assert [a.type for a in alerts] == ["temperature"]

    def test_thresholds_are_boundaries(self):
        """Overheating is strictly above 50; full is 90 and above."""
        assert derive_alerts(_reading(temperature=50, level=89.9)) == []
        assert [a.type for a in derive_alerts(_reading(temperature=30, level=90))] == ["tank"]

    def test_no_reading(self):
        assert derive_alerts(None) == []

    def test_alert_carries_machine_and_reading_time(self):
        config = TelemetrySettings(machine_id="VB-0042", location="Quezon City")
        created = utcnow() - timedelta(minutes=5)

        alerts = derive_alerts(_reading(level=99, created_at=created), config)

        assert alerts[0].machine == "VB-0042"
        assert alerts[0].location == "Quezon City"
        assert alerts[0].time == created

    def test_custom_thresholds(self):
        config = TelemetrySettings(overheat_threshold=40, full_level_threshold=80)

        alerts = derive_alerts(_reading(level=85, temperature=45), config)

        assert [a.type for a in alerts] == ["temperature", "tank"]


class TestDefaultReading:
    def test_default_reading(self):
        reading = default_reading()

        assert reading.status == "Unknown"
        assert reading.level == 0
        assert reading.battery_level == 100
        assert reading.alert == "normal"
        assert reading.created_at is None
        assert derive_alerts(reading) == []


class TestTankService:
    """Tests for storing and querying readings."""

    @pytest.mark.asyncio
    async def test_missing_fields_get_defaults(self, db_session):
        reading = await TankService.record_reading(db_session, TankReadingCreate())

        assert reading.id is not None
        assert reading.status == "Unknown"
        assert reading.level == 0
        assert reading.temperature == 0
        assert reading.battery_level == 0
        assert reading.alert == "normal"

    @pytest.mark.asyncio
    async def test_out_of_range_values_are_accepted(self, db_session):
        reading = await TankService.record_reading(
            db_session, TankReadingCreate(status="Overflowing", level=140, temperature=-5)
        )

        assert reading.status == "Overflowing"
        assert reading.level == 140

    @pytest.mark.asyncio
    async def test_latest_without_readings(self, db_session):
        reading = await TankService.latest(db_session)

        assert reading.status == "Unknown"
        assert reading.battery_level == 100

    @pytest.mark.asyncio
    async def test_current_alerts_follow_latest_reading_only(self, db_session):
        now = utcnow()
        db_session.add(_reading(status="Full", level=98, temperature=70, created_at=now - timedelta(minutes=2)))
        db_session.add(_reading(status="Normal", level=40, temperature=28, created_at=now))
        await db_session.commit()

        assert await TankService.current_alerts(db_session) == []

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_limited(self, db_session):
        now = utcnow()
        for minutes, level in ((3, 10), (2, 20), (1, 30)):
            db_session.add(_reading(level=level, created_at=now - timedelta(minutes=minutes)))
        await db_session.commit()

        history = await TankService.history(db_session, limit=2)

        assert [r.level for r in history] == [30, 20]
