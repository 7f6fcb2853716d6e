"""
Root endpoint handler.
"""

from fastapi import APIRouter

from core.config import settings

router = APIRouter()


@router.get("/")
async def root():
    """Service banner with the API entry points."""
    return {
        "name": settings.api.app_name,
        "version": settings.api.app_version,
        "status": "operational",
        "endpoints": {
            "auth": f"{settings.api.api_prefix}/auth",
            "users": f"{settings.api.api_prefix}/users",
            "tank": f"{settings.api.api_prefix}/tank",
            "pump": f"{settings.api.api_prefix}/pump",
            "maintenance": f"{settings.api.api_prefix}/maintenance",
            "health": "/health",
        },
    }
