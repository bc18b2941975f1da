from datetime import datetime
from enum import IntEnum

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel


class AppointmentStatus(IntEnum):
    SCHEDULED = 0
    COMPLETED = 1
    CANCELLED = 2


_ACTIVE_ONLY = text(f"status <> {AppointmentStatus.CANCELLED.value}")


def _naive_now() -> datetime:
    """Naive wall-clock time for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now().replace(microsecond=0)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # One live appointment per doctor and start time; cancelled rows do not hold the slot.
    __table_args__ = (
        Index(
            "uq_appointments_doctor_time_active",
            "doctor_id",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", ondelete="CASCADE", index=True)
    patient_id: int = Field(index=True)
    # Naive wall-clock values; plain DateTime keeps them TIMESTAMP WITHOUT TIME ZONE.
    appointment_time: datetime = Field(sa_type=DateTime(), index=True)
    status: int = Field(default=AppointmentStatus.SCHEDULED)
    created_at: datetime = Field(default_factory=_naive_now, sa_type=DateTime())


class AppointmentCreate(SQLModel):
    doctor_id: int
    patient_id: int
    appointment_time: datetime


class AppointmentPublic(SQLModel):
    id: int
    doctor_id: int
    patient_id: int
    appointment_time: datetime
    status: int
    created_at: datetime
