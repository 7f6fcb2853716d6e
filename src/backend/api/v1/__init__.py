"""
API routes, mounted under /api.
"""

from fastapi import APIRouter

from .endpoints import auth, config, maintenance, pump, tank, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(tank.router, prefix="/tank", tags=["tank"])
api_router.include_router(pump.router, prefix="/pump", tags=["pump"])
api_router.include_router(maintenance.router, prefix="/maintenance", tags=["maintenance"])
api_router.include_router(config.router, prefix="/config", tags=["config"])

__all__ = ["api_router"]
