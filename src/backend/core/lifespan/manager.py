"""
Application lifespan manager.

Startup order: logging, database, device clients, MQTT bridge.
Shutdown runs in reverse so the bridge stops consuming pump commands
before the database goes away.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.config import settings
from core.logging_config import LogConfig, stop_queue_listener
from . import tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_config = LogConfig(**settings.logging.log_config)
    await tasks.initialize_logging(settings, log_config)

    logger = logging.getLogger("main")
    await tasks.log_cors_configuration(settings, logger)

    # Retries until the database answers
    await tasks.initialize_database()

    tasks.build_device_clients(app, settings)
    await tasks.start_mqtt_bridge(app)

    logger.info(f"{settings.api.app_name} v{settings.api.app_version} ready")

    yield

    logger.info(f"Shutting down {settings.api.app_name}...")

    await tasks.shutdown_mqtt_bridge(app)
    await tasks.shutdown_database()

    # Last, so shutdown messages are flushed
    stop_queue_listener()
