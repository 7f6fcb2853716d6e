"""
Maintenance ticket schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from core.schema_base import HTTPSchemaModel, RequestSchemaModel, reject_null, to_naive_utc
from db.enums import MaintenancePriority, MaintenanceStatus


class MaintenanceCreate(RequestSchemaModel):
    title: str = Field(min_length=1, max_length=200)
    machine_id: str = Field(min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, max_length=200)
    scheduled_date: Optional[datetime] = None
    priority: MaintenancePriority = MaintenancePriority.LOW

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v):
        return to_naive_utc(v)


class MaintenanceUpdate(RequestSchemaModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    machine_id: Optional[str] = Field(default=None, min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, max_length=200)
    scheduled_date: Optional[datetime] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v):
        return to_naive_utc(v)

    @field_validator("title", "machine_id", "priority", "status")
    @classmethod
    def reject_null_fields(cls, v):
        return reject_null(v)


class MaintenanceRead(HTTPSchemaModel):
    id: UUID
    title: str
    machine_id: str
    location: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    priority: MaintenancePriority
    status: MaintenanceStatus
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
