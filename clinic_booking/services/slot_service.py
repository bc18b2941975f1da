from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.appointment import Appointment, AppointmentStatus
from clinic_booking.models.doctor import Doctor
from clinic_booking.services.availability import compute_availability, has_slot_in_period


def local_naive_now() -> datetime:
    """Clinic wall-clock time; appointment times are stored naive in the same clock."""
    return datetime.now()


def _day_bounds(d: date) -> tuple[datetime, datetime]:
    start = datetime(d.year, d.month, d.day, 0, 0, 0)
    return start, start + timedelta(days=1)


async def get_doctor(session: AsyncSession, doctor_id: int) -> Doctor | None:
    result = await session.execute(select(Doctor).where(Doctor.id == doctor_id))
    return result.scalar_one_or_none()


async def list_doctors(session: AsyncSession, period: str | None = None) -> list[Doctor]:
    """All doctors by id; with `period` ("AM"/"PM") only those with a slot in that window."""
    result = await session.execute(select(Doctor).order_by(Doctor.id))
    doctors = list(result.scalars().all())
    if period:
        doctors = [d for d in doctors if has_slot_in_period(d.available_times, period)]
    return doctors


async def get_booked_times(
    session: AsyncSession, doctor_id: int, d: date, excluding_id: int | None = None
) -> list[datetime]:
    """Start times of the doctor's non-cancelled appointments on `d`."""
    start_inclusive, end_exclusive = _day_bounds(d)
    q = select(Appointment.appointment_time).where(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_time >= start_inclusive,
        Appointment.appointment_time < end_exclusive,
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if excluding_id is not None:
        q = q.where(Appointment.id != excluding_id)
    result = await session.execute(q)
    return [row[0] for row in result.all()]


async def exists_conflicting_appointment(
    session: AsyncSession,
    doctor_id: int,
    when: datetime,
    excluding_id: int | None = None,
) -> bool:
    q = select(Appointment.id).where(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_time == when,
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if excluding_id is not None:
        q = q.where(Appointment.id != excluding_id)
    result = await session.execute(q.limit(1))
    return result.first() is not None


async def get_doctor_availability(
    session: AsyncSession, doctor_id: int, d: date, now: datetime | None = None
) -> list[str] | None:
    """Open slot texts for the doctor on `d`, or None if the doctor does not exist."""
    doctor = await get_doctor(session, doctor_id)
    if doctor is None:
        return None
    booked = await get_booked_times(session, doctor_id, d)
    return compute_availability(doctor.available_times, booked, d, now or local_naive_now())
