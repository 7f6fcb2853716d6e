"""
Health check endpoint handler.
"""

from fastapi import APIRouter, Request

from core.config import settings
from core.database import check_database

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring.
    Reports database reachability and the MQTT broker connection.
    """
    health_status = {
        "status": "healthy",
        "service": settings.api.app_name,
        "version": settings.api.app_version,
        "services": {},
    }

    db_healthy = await check_database()
    health_status["services"]["database"] = {
        "status": "healthy" if db_healthy else "unhealthy",
    }
    if not db_healthy:
        health_status["status"] = "degraded"

    bridge = getattr(request.app.state, "mqtt_bridge", None)
    if settings.mqtt.enabled:
        mqtt_healthy = bool(bridge and bridge.connected)
        health_status["services"]["mqtt"] = {
            "status": "healthy" if mqtt_healthy else "unhealthy",
            "broker": f"{settings.mqtt.host}:{settings.mqtt.port}",
        }
        if not mqtt_healthy:
            health_status["status"] = "degraded"
    else:
        health_status["services"]["mqtt"] = {"status": "disabled"}

    return health_status
