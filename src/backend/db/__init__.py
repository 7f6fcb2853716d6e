"""
Database models and enumerations.
"""
from .enums import (
    MaintenancePriority,
    MaintenanceStatus,
    PumpState,
    TankAlert,
    TankStatus,
)
from .models import MaintenanceTicket, TankReading, User, utcnow

__all__ = [
    "MaintenancePriority",
    "MaintenanceStatus",
    "MaintenanceTicket",
    "PumpState",
    "TankAlert",
    "TankReading",
    "TankStatus",
    "User",
    "utcnow",
]
