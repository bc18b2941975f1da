from clinic_booking.models.doctor import Doctor, DoctorPublic
from clinic_booking.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
)

__all__ = [
    "Doctor",
    "DoctorPublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
]
