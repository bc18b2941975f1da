"""Parsing of doctor-entered slot text into canonical 24-hour start times.

Doctors' availability is stored as free text ("09:00-10:00", "9:00 AM – 10:00 AM",
"14:00; 15:00", legacy rows with stray quotes or non-breaking spaces). Everything in
this module is tolerant: a token that cannot be read yields a ParseFailure value so
callers can skip it and keep the doctor's other slots bookable.
"""
import logging
import re
from collections.abc import Iterable
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# Dash and space variants found in pasted schedules; quotes are dropped entirely.
_CLEANUP_TABLE = str.maketrans(
    {
        "–": "-",  # en dash
        "—": "-",  # em dash
        " ": " ",  # no-break space
        " ": " ",  # figure space
        " ": " ",  # narrow no-break space
        '"': None,
        "'": None,
        "“": None,
        "”": None,
        "‘": None,
        "’": None,
    }
)
_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATOR_RE = re.compile(r"[,;]")
_TIME_TOKEN_RE = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?")
_MERIDIEM_RE = re.compile(r"\s*([AaPp][Mm])$")

# Tried in order; first one that parses wins.
_TIME_FORMATS = ("%H:%M:%S", "%H:%M", "%I:%M %p")


class ParseFailure(BaseModel):
    """A slot token that could not be read as a time; `text` is the cleaned input."""

    model_config = ConfigDict(frozen=True)

    text: str


class CanonicalSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: time
    source_text: str

    @property
    def label(self) -> str:
        return format_hhmm(self.start)


def format_hhmm(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def slot_key(value: time | datetime) -> time:
    """Minute-precision time of day used to compare slots, bookings and requests."""
    return time(value.hour, value.minute)


def sanitize_slot_text(value: str | None) -> str:
    if not value:
        return ""
    cleaned = value.translate(_CLEANUP_TABLE)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def split_slot_spec(spec: str | None) -> list[str]:
    """Split a stored slot string on commas/semicolons, dropping empty pieces."""
    if not spec:
        return []
    return [piece.strip() for piece in _SEPARATOR_RE.split(spec) if piece.strip()]


def extract_time_token(value: str) -> str | None:
    match = _TIME_TOKEN_RE.search(value)
    if not match:
        return None
    token = match.group(0)
    # "9:00am" / "9:00 am" -> "9:00 AM" so %p sees a separate upper-case marker
    return _MERIDIEM_RE.sub(lambda m: " " + m.group(1).upper(), token)


def parse_slot_time(raw: str | None) -> time | ParseFailure:
    """Read the start time of one slot token.

    Only the part before the first hyphen counts; the end of a range is informational
    since the appointment length is fixed.
    """
    cleaned = sanitize_slot_text(raw)
    start_part = cleaned.split("-", 1)[0].strip()
    token = extract_time_token(start_part)
    if token is None:
        return ParseFailure(text=cleaned)
    for fmt in _TIME_FORMATS:
        try:
            return slot_key(datetime.strptime(token, fmt))
        except ValueError:
            continue
    return ParseFailure(text=cleaned)


def normalize_slot_time(raw: str | None) -> str | ParseFailure:
    """Canonical zero-padded HH:MM for a slot token, or ParseFailure."""
    parsed = parse_slot_time(raw)
    if isinstance(parsed, ParseFailure):
        return parsed
    return format_hhmm(parsed)


def canonical_slots(specs: Iterable[str] | None) -> list[CanonicalSlot]:
    """All readable slots from a doctor's stored specs, first occurrence of each time kept."""
    slots: list[CanonicalSlot] = []
    seen: set[time] = set()
    for spec in specs or ():
        for token in split_slot_spec(spec):
            parsed = parse_slot_time(token)
            if isinstance(parsed, ParseFailure):
                logger.warning("Skipping unreadable slot text %r", parsed.text)
                continue
            if parsed in seen:
                continue
            seen.add(parsed)
            slots.append(CanonicalSlot(start=parsed, source_text=token))
    return slots


def slot_matches_time(spec: str | None, requested: time | datetime) -> bool:
    """True when any token of a stored slot string starts at `requested` (minute precision)."""
    wanted = slot_key(requested)
    for token in split_slot_spec(spec):
        parsed = parse_slot_time(token)
        if not isinstance(parsed, ParseFailure) and parsed == wanted:
            return True
    return False
