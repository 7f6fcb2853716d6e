"""
Unit tests for SmartPlugClient.

The tapo ApiClient is replaced with mocks; no device is contacted.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from api.services.smart_plug import SmartPlugClient
from core.config import TapoSettings
from core.exceptions import UpstreamError


def _result(**fields):
    result = MagicMock()
    result.to_dict.return_value = fields
    for name, value in fields.items():
        setattr(result, name, value)
    return result


@pytest.fixture
def device():
    device = MagicMock()
    device.on = AsyncMock()
    device.off = AsyncMock()
    device.get_device_info = AsyncMock(
        return_value=_result(device_on=True, nickname="Tank Pump", model="P110")
    )
    device.get_energy_usage = AsyncMock(return_value=_result(today_energy=150))
    return device


@pytest.fixture
def api_client(device):
    with patch("api.services.smart_plug.ApiClient") as api_client_cls:
        api_client_cls.return_value.p110 = AsyncMock(return_value=device)
        yield api_client_cls


@pytest.fixture
def plug():
    return SmartPlugClient(
        TapoSettings(email="ops@vegobolt.com", password="secret", device_ip="192.168.1.50")
    )


class TestConnect:
    @pytest.mark.asyncio
    async def test_unconfigured_plug(self):
        plug = SmartPlugClient(TapoSettings(email="", password="", device_ip=""))

        with pytest.raises(UpstreamError) as exc_info:
            await plug.turn_on()

        assert exc_info.value.message == "Smart plug is not configured"
        assert plug.device_id == "unconfigured"

    @pytest.mark.asyncio
    async def test_handshake_happens_once(self, plug, api_client, device):
        await plug.turn_on()
        await plug.turn_off()

        api_client.assert_called_once_with("ops@vegobolt.com", "secret", timeout_s=10)
        api_client.return_value.p110.assert_awaited_once_with("192.168.1.50")
        device.on.assert_awaited_once()
        device.off.assert_awaited_once()
        assert plug.connected is True

    @pytest.mark.asyncio
    async def test_connection_failure(self, plug, api_client):
        api_client.return_value.p110 = AsyncMock(side_effect=OSError("host unreachable"))

        with pytest.raises(UpstreamError) as exc_info:
            await plug.turn_on()

        assert exc_info.value.message == "Failed to connect to smart plug"
        assert exc_info.value.error == "host unreachable"
        assert plug.connected is False


class TestCommands:
    @pytest.mark.asyncio
    async def test_device_info_and_state(self, plug, api_client):
        info = await plug.get_device_info()

        assert info["nickname"] == "Tank Pump"
        assert await plug.is_on() is True

    @pytest.mark.asyncio
    async def test_energy_usage(self, plug, api_client):
        assert await plug.get_energy_usage() == {"today_energy": 150}

    @pytest.mark.asyncio
    async def test_failed_call_forces_reconnect(self, plug, api_client, device):
        device.on.side_effect = RuntimeError("session expired")

        with pytest.raises(UpstreamError) as exc_info:
            await plug.turn_on()

        assert exc_info.value.message == "Failed to turn pump ON"
        assert plug.connected is False

        device.on.side_effect = None
        await plug.turn_on()

        assert api_client.return_value.p110.await_count == 2
