"""
Integration tests for the pump control API.

The smart plug and MQTT publisher are the in-memory fakes from conftest.
"""

import asyncio

import pytest

from core.exceptions import UpstreamError


class TestPumpSwitching:
    """Tests for ON/OFF/TOGGLE."""

    @pytest.mark.asyncio
    async def test_on_and_off(self, client, fake_plug):
        on = await client.post("/api/pump/on")
        assert on.status_code == 200
        assert on.json() == {
            "success": True,
            "message": "Pump turned ON",
            "data": {"state": "ON"},
            "error": None,
        }
        assert fake_plug.device_on is True

        off = await client.post("/api/pump/off")
        assert off.json()["data"]["state"] == "OFF"
        assert fake_plug.device_on is False

    @pytest.mark.asyncio
    async def test_toggle(self, client, fake_plug):
        fake_plug.device_on = True

        response = await client.post("/api/pump/toggle")

        assert response.json()["message"] == "Pump toggled to OFF"
        assert fake_plug.device_on is False

    @pytest.mark.asyncio
    async def test_concurrent_toggles(self, client, fake_plug):
        first, second = await asyncio.gather(
            client.post("/api/pump/toggle"),
            client.post("/api/pump/toggle"),
        )

        states = sorted([first.json()["data"]["state"], second.json()["data"]["state"]])
        assert states == ["OFF", "ON"]
        assert fake_plug.device_on is False

    @pytest.mark.asyncio
    async def test_state_change_is_echoed(self, client, fake_publisher):
        await client.post("/api/pump/on")

        topic, payload = fake_publisher.messages[-1]
        assert topic == "vegobolt/tank/pump/status"
        assert payload["state"] == "ON"
        assert payload["source"] == "api"

    @pytest.mark.asyncio
    async def test_echo_failure_still_succeeds(self, client, fake_publisher, fake_plug):
        fake_publisher.connected = False

        response = await client.post("/api/pump/on")

        assert response.status_code == 200
        assert fake_plug.device_on is True


class TestPumpControl:
    """Tests for the unified /api/pump/control endpoint."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command,state",
        [("ON", "ON"), ("off", "OFF"), ("1", "ON"), (0, "OFF")],
    )
    async def test_commands(self, client, command, state):
        response = await client.post("/api/pump/control", json={"command": command})

        assert response.status_code == 200
        assert response.json()["data"]["state"] == state

    @pytest.mark.asyncio
    async def test_message_names_the_command(self, client):
        response = await client.post("/api/pump/control", json={"command": "toggle"})

        assert response.json()["message"] == "Pump TOGGLE"

    @pytest.mark.asyncio
    async def test_missing_command(self, client):
        response = await client.post("/api/pump/control", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Command is required"

    @pytest.mark.asyncio
    async def test_invalid_command(self, client, fake_plug):
        response = await client.post("/api/pump/control", json={"command": "FLOOD"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid command. Use ON, OFF, or TOGGLE"
        assert fake_plug.commands == []


class TestPumpQueries:
    @pytest.mark.asyncio
    async def test_status(self, client, fake_plug):
        fake_plug.device_on = True

        response = await client.get("/api/pump/status")

        data = response.json()["data"]
        assert data["status"] == "ON"
        assert data["device"] == {"nickname": "Tank Pump", "model": "P110", "signalLevel": 3, "onTime": 120}

    @pytest.mark.asyncio
    async def test_energy(self, client):
        response = await client.get("/api/pump/energy")

        assert response.json()["data"]["energy"]["month_energy"] == 4200


class TestPlugUnavailable:
    @pytest.mark.asyncio
    async def test_plug_failure_is_500(self, client, fake_plug, monkeypatch):
        async def refuse():
            raise UpstreamError("Failed to turn on pump", error="Connection refused")

        monkeypatch.setattr(fake_plug, "turn_on", refuse)

        response = await client.post("/api/pump/on")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Failed to turn on pump"
        assert body["error"] == "Connection refused"
