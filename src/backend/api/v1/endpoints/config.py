"""
Client configuration endpoints.
"""

from fastapi import APIRouter

from api.schemas.common import ApiResponse
from api.schemas.config import BackendUrlData
from api.services.network import resolve_backend_url

router = APIRouter()


@router.get("/backend-url", response_model=ApiResponse[BackendUrlData])
async def get_backend_url():
    """Backend address for the mobile app: BACKEND_URL if set, else the detected LAN IP."""
    backend_url, auto_detected = resolve_backend_url()
    return ApiResponse(data=BackendUrlData(backend_url=backend_url, auto_detected=auto_detected))
