"""
Tank telemetry endpoints.

Open endpoints: the tank controller posts readings without a session.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import ApiResponse
from api.schemas.tank import AlertRead, TankReadingCreate, TankReadingRead
from api.services.tank_service import TankService
from core.database import get_session

router = APIRouter()


@router.get("/status", response_model=ApiResponse[TankReadingRead])
async def get_status(db: AsyncSession = Depends(get_session)):
    """Latest reading, or a default reading if the tank has never reported."""
    reading = await TankService.latest(db)
    return ApiResponse(data=TankReadingRead.model_validate(reading))


@router.post("/status", response_model=ApiResponse[TankReadingRead])
async def record_status(data: TankReadingCreate, db: AsyncSession = Depends(get_session)):
    reading = await TankService.record_reading(db, data)
    return ApiResponse(message="Tank data updated", data=TankReadingRead.model_validate(reading))


# Path used by deployed ESP32 firmware
router.add_api_route(
    "/update",
    record_status,
    methods=["POST"],
    response_model=ApiResponse[TankReadingRead],
)


@router.get("/alerts", response_model=ApiResponse[List[AlertRead]])
async def get_alerts(db: AsyncSession = Depends(get_session)):
    """Alerts for the current state only; cleared conditions produce nothing."""
    return ApiResponse(data=await TankService.current_alerts(db))


@router.get("/history", response_model=ApiResponse[List[TankReadingRead]])
async def get_history(
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
):
    readings = await TankService.history(db, limit)
    return ApiResponse(data=[TankReadingRead.model_validate(r) for r in readings])
