from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_now, get_session
from clinic_booking.api.schemas.appointment import AvailabilityResponse
from clinic_booking.models.doctor import DoctorPublic
from clinic_booking.services.slot_service import get_doctor_availability, list_doctors

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.get("", response_model=list[DoctorPublic])
async def doctors(
    period: str | None = Query(None, pattern="^(?i:am|pm)$"),
    session: AsyncSession = Depends(get_session),
) -> list[DoctorPublic]:
    """List doctors; `period=AM|PM` keeps only those with a slot in that half of the day."""
    rows = await list_doctors(session, period=period)
    return [
        DoctorPublic(id=d.id, name=d.name, specialty=d.specialty, available_times=d.available_times or [])
        for d in rows
    ]


@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def doctor_availability(
    doctor_id: int,
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(get_now),
) -> AvailabilityResponse:
    """Open slots for the doctor on the given date, in the doctor's own slot text."""
    slots = await get_doctor_availability(session, doctor_id, date_param, now=now)
    if slots is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return AvailabilityResponse(doctor_id=doctor_id, date=date_param, slots=slots)
