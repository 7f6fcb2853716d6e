"""
Pump control.

Drives the smart plug and echoes every successful state change to the MQTT
status topic so the tank controller and other subscribers stay in sync.

State changes on one plug are serialized by a lock, so two concurrent
toggles always end in opposite states rather than both reading the same
pre-state.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, Tuple

from core.config import settings
from core.exceptions import UpstreamError, ValidationError
from core.logging_config import DeviceLogger
from core.metrics import track_pump_command
from db.enums import PumpState

logger = logging.getLogger(__name__)
device_logger = DeviceLogger("pump")

TOGGLE = "TOGGLE"

COMMAND_ALIASES = {
    "ON": PumpState.ON.value,
    "1": PumpState.ON.value,
    "OFF": PumpState.OFF.value,
    "0": PumpState.OFF.value,
    "TOGGLE": TOGGLE,
}


class StatusPublisher(Protocol):
    async def publish(self, topic: str, payload: Dict[str, Any]) -> bool: ...


def parse_command(command: Any) -> str:
    """
    Map a raw command to ON, OFF or TOGGLE (case-insensitive; 1 and 0 accepted).

    Raises:
        ValidationError: If the command is missing or unrecognized
    """
    if command is None or (isinstance(command, str) and not command.strip()):
        raise ValidationError("Command is required")

    parsed = COMMAND_ALIASES.get(str(command).strip().upper())
    if parsed is None:
        raise ValidationError("Invalid command. Use ON, OFF, or TOGGLE")
    return parsed


def iso_timestamp() -> str:
    """Current UTC time in ISO 8601 with millisecond precision and a 'Z' suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PumpController:
    """Pump operations on a single smart plug."""

    def __init__(self, plug, publisher: Optional[StatusPublisher] = None, status_topic: Optional[str] = None):
        self.plug = plug
        self.publisher = publisher
        self.status_topic = status_topic or settings.mqtt.pump_status_topic
        self._lock = asyncio.Lock()

    async def turn_on(self, source: str = "api") -> PumpState:
        async with self._lock:
            return await self._apply(PumpState.ON, source, command=PumpState.ON.value)

    async def turn_off(self, source: str = "api") -> PumpState:
        async with self._lock:
            return await self._apply(PumpState.OFF, source, command=PumpState.OFF.value)

    async def toggle(self, source: str = "api") -> PumpState:
        """Read the current state and switch to the opposite one, atomically per plug."""
        async with self._lock:
            try:
                is_on = await self.plug.is_on()
            except UpstreamError as e:
                track_pump_command(TOGGLE, source, "failure")
                device_logger.pump_command_failed(TOGGLE, source, e.error or e.message)
                raise
            target = PumpState.OFF if is_on else PumpState.ON
            return await self._apply(target, source, command=TOGGLE)

    async def execute(self, command: Any, source: str = "api") -> Tuple[str, PumpState]:
        """
        Run a raw ON/OFF/TOGGLE command.

        Returns:
            Tuple of (normalized command, resulting state)
        """
        parsed = parse_command(command)
        if parsed == TOGGLE:
            return parsed, await self.toggle(source)
        if parsed == PumpState.ON.value:
            return parsed, await self.turn_on(source)
        return parsed, await self.turn_off(source)

    async def status(self) -> Tuple[PumpState, Dict[str, Any]]:
        """Current plug state plus the device details shown to clients."""
        info = await self.plug.get_device_info()
        state = PumpState.ON if info.get("device_on") else PumpState.OFF
        device = {
            "nickname": info.get("nickname"),
            "model": info.get("model"),
            "signal_level": info.get("signal_level"),
            "on_time": info.get("on_time"),
        }
        return state, device

    async def energy(self) -> Dict[str, Any]:
        return await self.plug.get_energy_usage()

    async def _apply(self, target: PumpState, source: str, command: str) -> PumpState:
        started = time.perf_counter()
        try:
            if target == PumpState.ON:
                await self.plug.turn_on()
            else:
                await self.plug.turn_off()
        except UpstreamError as e:
            track_pump_command(command, source, "failure")
            device_logger.pump_command_failed(command, source, e.error or e.message)
            raise

        track_pump_command(command, source, "success", time.perf_counter() - started)
        device_logger.pump_command(command, source, target.value)
        await self._publish_state(target, source)
        return target

    async def _publish_state(self, state: PumpState, source: str) -> None:
        if self.publisher is None:
            return
        payload = {"state": state.value, "timestamp": iso_timestamp(), "source": source}
        if not await self.publisher.publish(self.status_topic, payload):
            # The plug has already switched; a missed echo is not a request failure
            logger.warning(f"Pump state {state.value} not echoed to {self.status_topic}")
