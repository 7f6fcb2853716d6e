"""
Database models.

- User: identity and credential record (email/password or Google federated)
- TankReading: append-only telemetry snapshots from the tank controller
- MaintenanceTicket: scheduled maintenance for a machine
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Column, DateTime, Float, Index, String, Text, Uuid
from sqlmodel import Field, SQLModel

from db.enums import MaintenancePriority, MaintenanceStatus, TankAlert, TankStatus


def utcnow() -> datetime:
    """
    Get current time in UTC (timezone-naive) for database storage.

    All datetimes are stored as naive UTC; the API layer serializes them
    with a 'Z' suffix.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TableModel(SQLModel):
    """Base table model with common functionality."""

    pass


class User(TableModel, table=True):
    """User account. The email column is unique and always stored lowercase."""

    __tablename__ = "users"

    id: UUID = Field(
        default_factory=uuid4,
        sa_column=Column(Uuid, primary_key=True),
        description="UUID primary key for user identification",
    )
    email: str = Field(
        max_length=255,
        sa_column=Column(String(255), nullable=False),
        description="Case-folded email address",
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Bcrypt hash, or a federated placeholder for Google accounts",
    )
    first_name: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
    )
    last_name: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
    )
    display_name: str = Field(
        default="",
        sa_column=Column(String(200), nullable=False, default=""),
    )
    phone_number: Optional[str] = Field(default=None, max_length=30)
    profile_picture: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, default=True, nullable=False),
    )
    is_admin: bool = Field(
        default=False,
        sa_column=Column(Boolean, default=False, nullable=False),
    )
    is_email_verified: bool = Field(
        default=False,
        sa_column=Column(Boolean, default=False, nullable=False),
    )

    email_verification_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
    )
    email_verification_expires: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )
    password_reset_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
    )
    password_reset_expires: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, default=utcnow),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow),
    )

    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        Index("ix_users_email_verification_token", "email_verification_token"),
        Index("ix_users_password_reset_token", "password_reset_token"),
    )

    def refresh_display_name(self) -> None:
        """Derive display_name from first/last name when it is empty."""
        if not self.display_name:
            self.display_name = f"{self.first_name} {self.last_name}".strip()


class TankReading(TableModel, table=True):
    """Immutable telemetry snapshot. Rows are only ever inserted."""

    __tablename__ = "tank_readings"

    id: Optional[int] = Field(default=None, primary_key=True)
    status: str = Field(
        default=TankStatus.UNKNOWN.value,
        sa_column=Column(String(20), nullable=False, default=TankStatus.UNKNOWN.value),
    )
    level: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))
    temperature: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))
    battery_level: float = Field(default=0, sa_column=Column(Float, nullable=False, default=0))
    alert: str = Field(
        default=TankAlert.NORMAL.value,
        sa_column=Column(String(30), nullable=False, default=TankAlert.NORMAL.value),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, default=utcnow),
    )

    __table_args__ = (Index("ix_tank_readings_created_at", "created_at"),)


class MaintenanceTicket(TableModel, table=True):
    """Scheduled maintenance entry. created_by is a weak reference to users.id."""

    __tablename__ = "maintenance_tickets"

    id: UUID = Field(
        default_factory=uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    title: str = Field(sa_column=Column(String(200), nullable=False))
    machine_id: str = Field(sa_column=Column(String(50), nullable=False))
    location: Optional[str] = Field(default=None, max_length=200)
    scheduled_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
    )
    priority: str = Field(
        default=MaintenancePriority.LOW.value,
        sa_column=Column(String(10), nullable=False, default=MaintenancePriority.LOW.value),
    )
    status: str = Field(
        default=MaintenanceStatus.SCHEDULED.value,
        sa_column=Column(
            String(10), nullable=False, default=MaintenanceStatus.SCHEDULED.value
        ),
    )
    created_by: Optional[UUID] = Field(
        default=None,
        sa_column=Column(Uuid, nullable=True),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, default=utcnow),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow),
    )

    __table_args__ = (
        Index("ix_maintenance_tickets_status", "status"),
        Index("ix_maintenance_tickets_scheduled_date", "scheduled_date"),
    )
