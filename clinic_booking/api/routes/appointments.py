import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_now, get_session
from clinic_booking.api.schemas.appointment import (
    BookAppointmentRequest,
    RescheduleAppointmentRequest,
)
from clinic_booking.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
)
from clinic_booking.services.appointment_service import (
    BookingOutcome,
    cancel_appointment,
    create_appointment,
    reschedule_appointment,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    """Build public response; ensure id and datetimes are plain Python types for JSON."""
    slot = a.appointment_time
    if isinstance(slot, datetime) and slot.tzinfo is not None:
        slot = slot.replace(tzinfo=None)
    return AppointmentPublic(
        id=int(a.id) if a.id is not None else 0,
        doctor_id=a.doctor_id,
        patient_id=a.patient_id,
        appointment_time=slot,
        status=int(a.status),
        created_at=a.created_at,
    )


def _raise_for_outcome(outcome: BookingOutcome) -> None:
    if outcome is BookingOutcome.DOCTOR_NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    if outcome is BookingOutcome.SLOT_UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Requested time is not an open slot for this doctor.",
        )


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(get_now),
) -> AppointmentPublic:
    data = AppointmentCreate(
        doctor_id=body.doctor_id,
        patient_id=body.patient_id,
        appointment_time=body.appointment_time,
    )
    outcome, appointment = await create_appointment(session, data, now=now)
    _raise_for_outcome(outcome)
    return _to_public(appointment)


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def move_appointment(
    appointment_id: int,
    body: RescheduleAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(get_now),
) -> AppointmentPublic:
    result = await reschedule_appointment(session, appointment_id, body.appointment_time, now=now)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found or no longer scheduled",
        )
    outcome, appointment = result
    _raise_for_outcome(outcome)
    return _to_public(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    ok = await cancel_appointment(session, appointment_id)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found",
        )
    logger.info("Appointment %s cancelled", appointment_id)
