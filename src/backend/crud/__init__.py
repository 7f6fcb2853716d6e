"""
CRUD layer for database operations.

This package contains all data access logic isolated from business logic.
"""

from .base_repository import BaseCRUD
from .maintenance_crud import MaintenanceCRUD
from .tank_reading_crud import TankReadingCRUD
from .user_crud import UserCRUD, normalize_email

__all__ = [
    "BaseCRUD",
    "MaintenanceCRUD",
    "TankReadingCRUD",
    "UserCRUD",
    "normalize_email",
]
