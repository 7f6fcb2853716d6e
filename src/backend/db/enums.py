"""
Enumerations shared by database models and API schemas.
"""

from enum import Enum


class TankStatus(str, Enum):
    """Tank fill status reported by the ESP32 float sensors."""

    FULL = "Full"
    LOW = "Low"
    NORMAL = "Normal"
    UNKNOWN = "Unknown"


class TankAlert(str, Enum):
    """Alert tag reported by the device alongside each reading."""

    NORMAL = "normal"
    OVERHEATING = "overheating"


class MaintenancePriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "Scheduled"
    RESOLVED = "Resolved"
    CANCELED = "Canceled"


class PumpState(str, Enum):
    ON = "ON"
    OFF = "OFF"
