"""Shared fixtures: a throwaway SQLite database per test and a few seeded doctors."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV", "test")

from datetime import date, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from clinic_booking.models import Appointment, AppointmentStatus, Doctor  # noqa: E402


def future_day(days_ahead: int = 7) -> date:
    return date.today() + timedelta(days=days_ahead)


def at(d: date, hhmm: str) -> datetime:
    hour, minute = (int(p) for p in hhmm.split(":"))
    return datetime(d.year, d.month, d.day, hour, minute)


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def doctors(session_maker) -> dict[str, int]:
    """Seed doctors and return their ids by nickname."""
    rows = {
        "hourly": Doctor(name="Dr. Hourly", specialty="Cardiology", available_times=["09:00-10:00", "10:00-11:00"]),
        "messy": Doctor(
            name="Dr. Messy",
            specialty="Dermatology",
            available_times=['"09:00–10:00"', "9:00 AM - 10:00 AM", "2:00 PM; 15:00:00", "whenever"],
        ),
        "unset": Doctor(name="Dr. Unset", specialty="General", available_times=[]),
        "afternoon": Doctor(name="Dr. Afternoon", specialty="Cardiology", available_times=["13:00-14:00"]),
    }
    async with session_maker() as s:
        s.add_all(rows.values())
        await s.commit()
        return {key: doc.id for key, doc in rows.items()}


async def add_appointment(
    session_maker,
    doctor_id: int,
    when: datetime,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    patient_id: int = 1,
) -> int:
    async with session_maker() as s:
        appt = Appointment(doctor_id=doctor_id, patient_id=patient_id, appointment_time=when, status=status)
        s.add(appt)
        await s.commit()
        return appt.id
