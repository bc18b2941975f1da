import logging
from datetime import datetime
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from clinic_booking.services.availability import compute_availability
from clinic_booking.services.slot_service import (
    exists_conflicting_appointment,
    get_booked_times,
    get_doctor,
    local_naive_now,
)
from clinic_booking.services.slot_text import format_hhmm, slot_key, slot_matches_time

logger = logging.getLogger(__name__)


class BookingOutcome(str, Enum):
    VALID = "valid"
    DOCTOR_NOT_FOUND = "doctor_not_found"
    SLOT_UNAVAILABLE = "slot_unavailable"


def _to_slot_start(dt: datetime) -> datetime:
    """Naive clinic-local time truncated to the minute, the form appointments are stored in.

    Seconds are dropped so a request at 09:00:30 lands on the 09:00 slot and hits the
    same unique (doctor_id, appointment_time) key as an existing 09:00 booking.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt.replace(second=0, microsecond=0)


async def validate_booking(
    session: AsyncSession,
    doctor_id: int,
    requested_time: datetime,
    excluding_appointment_id: int | None = None,
    now: datetime | None = None,
) -> BookingOutcome:
    """Decide whether `requested_time` can be booked with the doctor.

    The time must be one of the doctor's open slots for that day, or failing that match
    a configured slot string directly (legacy text the availability pass may not
    surface). It must then not collide with another live appointment; when updating an
    appointment in place, pass its id so it does not collide with itself.

    This check alone does not stop two concurrent requests from both passing. The
    partial unique index on (doctor_id, appointment_time) rejects the second insert.
    """
    doctor = await get_doctor(session, doctor_id)
    if doctor is None:
        return BookingOutcome.DOCTOR_NOT_FOUND

    requested_time = _to_slot_start(requested_time)
    day = requested_time.date()
    wanted = slot_key(requested_time)
    booked = await get_booked_times(session, doctor_id, day, excluding_id=excluding_appointment_id)
    open_slots = compute_availability(doctor.available_times, booked, day, now or local_naive_now())

    if not any(slot_matches_time(text, wanted) for text in open_slots):
        if not any(slot_matches_time(spec, wanted) for spec in doctor.available_times or ()):
            logger.info(
                "Booking rejected: %s is not a slot of doctor %s on %s",
                format_hhmm(wanted),
                doctor_id,
                day,
            )
            return BookingOutcome.SLOT_UNAVAILABLE

    if await exists_conflicting_appointment(
        session, doctor_id, requested_time, excluding_id=excluding_appointment_id
    ):
        logger.info("Booking rejected: doctor %s already booked at %s", doctor_id, requested_time)
        return BookingOutcome.SLOT_UNAVAILABLE
    return BookingOutcome.VALID


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    result = await session.execute(select(Appointment).where(Appointment.id == appointment_id))
    return result.scalar_one_or_none()


async def create_appointment(
    session: AsyncSession, data: AppointmentCreate, now: datetime | None = None
) -> tuple[BookingOutcome, Appointment | None]:
    when = _to_slot_start(data.appointment_time)
    outcome = await validate_booking(session, data.doctor_id, when, now=now)
    if outcome is not BookingOutcome.VALID:
        return outcome, None
    appointment = Appointment(
        doctor_id=data.doctor_id,
        patient_id=data.patient_id,
        appointment_time=when,
    )
    session.add(appointment)
    try:
        await session.flush()
    except IntegrityError:
        # Lost the race against a concurrent booking for the same doctor/time
        await session.rollback()
        logger.warning("Double booking prevented for doctor %s at %s", data.doctor_id, when)
        return BookingOutcome.SLOT_UNAVAILABLE, None
    await session.refresh(appointment)
    return BookingOutcome.VALID, appointment


async def reschedule_appointment(
    session: AsyncSession, appointment_id: int, new_time: datetime, now: datetime | None = None
) -> tuple[BookingOutcome, Appointment | None] | None:
    """Move a scheduled appointment. Returns None if there is no such scheduled appointment."""
    appointment = await get_appointment(session, appointment_id)
    if appointment is None or appointment.status != AppointmentStatus.SCHEDULED:
        return None
    when = _to_slot_start(new_time)
    outcome = await validate_booking(
        session, appointment.doctor_id, when, excluding_appointment_id=appointment.id, now=now
    )
    if outcome is not BookingOutcome.VALID:
        return outcome, None
    appointment.appointment_time = when
    session.add(appointment)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        logger.warning(
            "Double booking prevented moving appointment %s to %s", appointment_id, when
        )
        return BookingOutcome.SLOT_UNAVAILABLE, None
    await session.refresh(appointment)
    return BookingOutcome.VALID, appointment


async def cancel_appointment(session: AsyncSession, appointment_id: int) -> bool:
    """Mark the appointment cancelled, freeing its slot. False if it does not exist."""
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return False
    appointment.status = AppointmentStatus.CANCELLED
    session.add(appointment)
    await session.flush()
    return True
