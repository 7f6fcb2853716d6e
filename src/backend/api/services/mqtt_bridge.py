"""
MQTT bridge.

Holds one broker connection for the life of the process:
- consumes pump control commands and forwards them to the pump controller
- logs sensor data and valve commands published by the tank controller
- publishes pump status echoes

The connection is re-established on a fixed interval after any broker error.
Failures on this path are logged only; there is no caller to report them to.
"""

import asyncio
import contextlib
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import aiomqtt

from core.config import MQTTSettings, settings
from core.exceptions import AppError, ValidationError
from core.logging_config import DeviceLogger
from core.metrics import mqtt_connected, track_mqtt_published, track_mqtt_received

logger = logging.getLogger(__name__)
device_logger = DeviceLogger("mqtt")

CommandHandler = Callable[[Any, str], Awaitable[Any]]


def extract_pump_command(payload: str) -> Any:
    """
    Pull the command out of a control message.

    Accepts JSON objects (`{"command": ...}` or `{"state": ...}`), bare JSON
    scalars and plain text.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return payload.strip()

    if isinstance(data, dict):
        return data.get("command", data.get("state"))
    return data


class MQTTBridge:
    """Long-lived MQTT connection with automatic reconnect."""

    def __init__(self, config: Optional[MQTTSettings] = None, command_handler: Optional[CommandHandler] = None):
        self.config = config or settings.mqtt
        self.command_handler = command_handler
        self._client: Optional[aiomqtt.Client] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def set_command_handler(self, handler: CommandHandler) -> None:
        self.command_handler = handler

    async def start(self) -> None:
        if not self.config.enabled:
            logger.info("MQTT bridge disabled (MQTT_ENABLED=false)")
            return
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="mqtt-bridge")
            logger.info(f"MQTT bridge starting: {self.config.host}:{self.config.port}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("MQTT bridge stopped")

    def _client_params(self) -> Dict[str, Any]:
        return {
            "hostname": self.config.host,
            "port": self.config.port,
            "identifier": f"{self.config.client_id_prefix}_{int(time.time() * 1000)}",
            "username": self.config.username,
            "password": self.config.password,
            "keepalive": self.config.keepalive,
            "timeout": self.config.connect_timeout,
        }

    async def _run(self) -> None:
        # CancelledError is not caught, so stop() ends the loop
        while True:
            try:
                async with aiomqtt.Client(**self._client_params()) as client:
                    self._client = client
                    mqtt_connected.set(1)
                    logger.info(f"Connected to MQTT broker {self.config.host}:{self.config.port}")
                    try:
                        for topic in self.config.subscriptions:
                            await client.subscribe(topic, qos=self.config.qos)
                            logger.info(f"Subscribed to: {topic}")
                        async for message in client.messages:
                            await self._dispatch(str(message.topic), message.payload)
                    finally:
                        self._client = None
                        mqtt_connected.set(0)
            except aiomqtt.MqttError as e:
                logger.warning(
                    f"MQTT connection lost: {e}; reconnecting in {self.config.reconnect_interval}s"
                )
            await asyncio.sleep(self.config.reconnect_interval)

    async def _dispatch(self, topic: str, payload: Union[bytes, bytearray, str]) -> None:
        try:
            await self.handle_message(topic, payload)
        except Exception:
            logger.exception(f"Unhandled error processing MQTT message on {topic}")

    async def handle_message(self, topic: str, payload: Union[bytes, bytearray, str]) -> None:
        """Route one inbound message by topic."""
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, (bytes, bytearray)) else str(payload)
        track_mqtt_received(topic)
        device_logger.mqtt_message(topic, text)

        if topic == self.config.pump_control_topic:
            await self._handle_pump_control(text)
        elif topic == self.config.sensor_data_topic:
            self._handle_sensor_data(text)
        elif topic == self.config.valve_control_topic:
            logger.info(f"Valve command observed: {text}")
        else:
            logger.debug(f"Ignoring message on unexpected topic {topic}")

    async def _handle_pump_control(self, text: str) -> None:
        if self.command_handler is None:
            logger.warning("Pump control message received but no pump controller is attached")
            return

        command = extract_pump_command(text)
        try:
            await self.command_handler(command, "mqtt")
        except ValidationError as e:
            logger.warning(f"Dropping pump command {command!r}: {e.message}")
        except AppError as e:
            logger.error(f"Pump command {command!r} from MQTT failed: {e.message} ({e.error})")

    def _handle_sensor_data(self, text: str) -> None:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing sensor data: {e}")
            return
        logger.info(f"Sensor data received: {data}")

    async def publish(self, topic: str, payload: Union[Dict[str, Any], str]) -> bool:
        """
        Publish a message (dicts are JSON-encoded).

        Returns:
            False if not connected or the publish failed, True otherwise
        """
        client = self._client
        if client is None:
            logger.warning(f"MQTT not connected, cannot publish to {topic}")
            track_mqtt_published(topic, False)
            return False

        body = json.dumps(payload) if isinstance(payload, dict) else payload
        try:
            await client.publish(topic, body, qos=self.config.qos)
        except aiomqtt.MqttError as e:
            logger.error(f"Error publishing to {topic}: {e}")
            track_mqtt_published(topic, False)
            return False

        logger.info(f"Published to {topic}: {body}")
        track_mqtt_published(topic, True)
        return True
