from datetime import date, datetime

from pydantic import BaseModel


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: date
    slots: list[str]  # doctor's own slot text, e.g. "09:00-10:00"


class BookAppointmentRequest(BaseModel):
    doctor_id: int
    patient_id: int
    appointment_time: datetime


class RescheduleAppointmentRequest(BaseModel):
    appointment_time: datetime
