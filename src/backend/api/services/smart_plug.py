"""
Tapo smart plug adapter.

Wraps the `tapo` SDK behind a small async interface. The device handshake is
performed lazily on first use and repeated after a failure.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from tapo import ApiClient

from core.config import TapoSettings, settings
from core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class SmartPlugClient:
    """Async client for a single Tapo P110 plug driving the pump."""

    def __init__(self, config: Optional[TapoSettings] = None):
        self.config = config or settings.tapo
        self._device = None
        self._connect_lock = asyncio.Lock()

    @property
    def device_id(self) -> str:
        return self.config.device_ip or "unconfigured"

    @property
    def connected(self) -> bool:
        return self._device is not None

    async def connect(self):
        """Log in to the plug if not already connected and return the device handle."""
        if self._device is not None:
            return self._device

        async with self._connect_lock:
            if self._device is not None:
                return self._device

            if not self.config.is_configured:
                logger.warning("Tapo credentials not configured; set TAPO_EMAIL, TAPO_PASSWORD, TAPO_DEVICE_IP")
                raise UpstreamError("Smart plug is not configured")

            logger.info(f"Connecting to Tapo device at {self.config.device_ip}...")
            try:
                client = ApiClient(self.config.email, self.config.password, timeout_s=self.config.timeout)
                device = await client.p110(self.config.device_ip)
                info = await device.get_device_info()
            except Exception as e:
                logger.error(f"Tapo connection error: {e}")
                raise UpstreamError("Failed to connect to smart plug", error=str(e))

            logger.info(f"Connected to Tapo device: {info.nickname or 'Unknown'} ({info.model})")
            self._device = device
            return device

    async def _call(self, action: str, method: str):
        device = await self.connect()
        try:
            return await getattr(device, method)()
        except Exception as e:
            # Drop the session so the next call performs a fresh handshake
            self._device = None
            logger.error(f"Tapo {action} failed: {e}")
            raise UpstreamError(f"Failed to {action}", error=str(e))

    async def turn_on(self) -> None:
        await self._call("turn pump ON", "on")
        logger.info("Tapo plug turned ON")

    async def turn_off(self) -> None:
        await self._call("turn pump OFF", "off")
        logger.info("Tapo plug turned OFF")

    async def get_device_info(self) -> Dict[str, Any]:
        """Device info as a plain dict (device_on, nickname, model, signal_level, on_time, ...)."""
        info = await self._call("get pump status", "get_device_info")
        return info.to_dict()

    async def is_on(self) -> bool:
        info = await self.get_device_info()
        return bool(info.get("device_on"))

    async def get_energy_usage(self) -> Dict[str, Any]:
        usage = await self._call("get energy usage", "get_energy_usage")
        return usage.to_dict()
