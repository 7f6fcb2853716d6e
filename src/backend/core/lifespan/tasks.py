"""
Lifespan startup and shutdown task functions.

This module contains individual task functions for application startup
and shutdown sequences. Each function handles a specific responsibility.
"""

import logging

from fastapi import FastAPI


async def initialize_logging(settings, log_config):
    """Setup logging configuration."""
    from core.logging_config import setup_logging

    logger = logging.getLogger("main")
    setup_logging(log_config)
    logger.info(f"🚀 Starting {settings.api.app_name} v{settings.api.app_version}...")


async def log_cors_configuration(settings, logger):
    """Log CORS configuration for debugging."""
    logger.info(f"🔒 CORS Allowed Origins: {settings.cors.origins}")


async def initialize_database():
    """Wait for the database and create missing tables."""
    from core.database import init_db

    logger = logging.getLogger("main")
    await init_db()
    logger.info("✅ Database initialized")


def build_device_clients(app: FastAPI, settings) -> None:
    """
    Construct the smart plug, pump controller and MQTT bridge and store them
    on app.state. The bridge publishes pump status echoes and feeds inbound
    control messages back to the controller.
    """
    from api.services.auth_service import AuthenticationService
    from api.services.email_service import EmailService
    from api.services.google_auth import GoogleTokenVerifier
    from api.services.mqtt_bridge import MQTTBridge
    from api.services.pump_controller import PumpController
    from api.services.smart_plug import SmartPlugClient

    plug = SmartPlugClient(settings.tapo)
    bridge = MQTTBridge(settings.mqtt)
    controller = PumpController(plug, publisher=bridge, status_topic=settings.mqtt.pump_status_topic)
    bridge.set_command_handler(controller.execute)

    app.state.smart_plug = plug
    app.state.mqtt_bridge = bridge
    app.state.pump_controller = controller
    app.state.auth_service = AuthenticationService(
        email_service=EmailService(settings.email),
        google_verifier=GoogleTokenVerifier(settings.google.client_ids),
    )


async def start_mqtt_bridge(app: FastAPI):
    logger = logging.getLogger("main")
    await app.state.mqtt_bridge.start()
    logger.info("✅ MQTT bridge started")


async def shutdown_mqtt_bridge(app: FastAPI):
    """Stop the MQTT bridge."""
    logger = logging.getLogger("main")
    bridge = getattr(app.state, "mqtt_bridge", None)
    if bridge is None:
        return
    try:
        await bridge.stop()
        logger.info("✅ MQTT bridge shut down")
    except Exception as e:
        logger.warning(f"⚠️  MQTT bridge shutdown error: {e}")


async def shutdown_database():
    """Close database connections."""
    from core.database import close_db

    logger = logging.getLogger("main")
    await close_db()
    logger.info("✅ Database connections closed")
