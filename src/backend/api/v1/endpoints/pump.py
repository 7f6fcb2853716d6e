"""
Pump (smart plug) control endpoints.
"""

from fastapi import APIRouter, Depends

from api.schemas.common import ApiResponse
from api.schemas.pump import (
    DeviceInfo,
    EnergyData,
    PumpCommandRequest,
    PumpStateData,
    PumpStatusData,
)
from api.services.pump_controller import PumpController
from core.dependencies import get_pump_controller

router = APIRouter()


@router.post("/on", response_model=ApiResponse[PumpStateData])
async def turn_on(controller: PumpController = Depends(get_pump_controller)):
    state = await controller.turn_on()
    return ApiResponse(message="Pump turned ON", data=PumpStateData(state=state))


@router.post("/off", response_model=ApiResponse[PumpStateData])
async def turn_off(controller: PumpController = Depends(get_pump_controller)):
    state = await controller.turn_off()
    return ApiResponse(message="Pump turned OFF", data=PumpStateData(state=state))


@router.post("/toggle", response_model=ApiResponse[PumpStateData])
async def toggle(controller: PumpController = Depends(get_pump_controller)):
    state = await controller.toggle()
    return ApiResponse(message=f"Pump toggled to {state.value}", data=PumpStateData(state=state))


@router.post("/control", response_model=ApiResponse[PumpStateData])
async def control(
    data: PumpCommandRequest,
    controller: PumpController = Depends(get_pump_controller),
):
    """Unified control: {"command": "ON" | "OFF" | "TOGGLE"} (1 and 0 also accepted)."""
    command, state = await controller.execute(data.command)
    return ApiResponse(message=f"Pump {command}", data=PumpStateData(state=state))


@router.get("/status", response_model=ApiResponse[PumpStatusData])
async def get_status(controller: PumpController = Depends(get_pump_controller)):
    state, device = await controller.status()
    return ApiResponse(data=PumpStatusData(status=state, device=DeviceInfo(**device)))


@router.get("/energy", response_model=ApiResponse[EnergyData])
async def get_energy(controller: PumpController = Depends(get_pump_controller)):
    return ApiResponse(data=EnergyData(energy=await controller.energy()))
