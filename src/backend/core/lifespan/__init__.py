"""Startup and shutdown of the database, device clients and MQTT bridge."""

from .manager import lifespan

__all__ = ["lifespan"]
