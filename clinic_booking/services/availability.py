from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from clinic_booking.core.config import settings
from clinic_booking.services.slot_text import CanonicalSlot, canonical_slots, format_hhmm, slot_key


def default_grid() -> list[CanonicalSlot]:
    """Business-hours slots for doctors with no readable configuration.

    One slot per appointment length from the start hour up to the exclusive end hour,
    i.e. 08:00-16:00 hourly with the default settings.
    """
    slots: list[CanonicalSlot] = []
    current = datetime.combine(date.min, time(settings.default_day_start_hour))
    end = datetime.combine(date.min, time(settings.default_day_end_hour))
    delta = timedelta(minutes=settings.slot_duration_minutes)
    while current < end:
        start = current.time()
        slots.append(CanonicalSlot(start=start, source_text=format_hhmm(start)))
        current += delta
    return slots


def compute_availability(
    doctor_slots: Iterable[str] | None,
    booked_times: Iterable[time | datetime],
    target_date: date,
    now: datetime,
) -> list[str]:
    """Open slots for one doctor on `target_date`, as the doctor's own slot text.

    Booked start times are removed; on the current day anything not strictly after
    `now` is removed too. Order follows the doctor's configuration.
    """
    slots = canonical_slots(doctor_slots)
    if not slots:
        slots = default_grid()
    booked = {slot_key(b) for b in booked_times}
    is_today = target_date == now.date()
    out: list[str] = []
    for slot in slots:
        if slot.start in booked:
            continue
        if is_today and datetime.combine(target_date, slot.start) <= now:
            continue
        out.append(slot.source_text)
    return out


def has_slot_in_period(doctor_slots: Iterable[str] | None, period: str | None) -> bool:
    """Whether any configured slot starts in the morning ("AM") or afternoon ("PM") window.

    AM covers 08:00-12:00 and PM 12:00-17:00, both ends inclusive, so a noon slot
    counts for either.
    """
    p = (period or "").strip().upper()
    if p == "AM":
        lo, hi = time(settings.default_day_start_hour), time(settings.morning_end_hour)
    elif p == "PM":
        lo, hi = time(settings.morning_end_hour), time(settings.default_day_end_hour)
    else:
        return False
    return any(lo <= slot.start <= hi for slot in canonical_slots(doctor_slots))
