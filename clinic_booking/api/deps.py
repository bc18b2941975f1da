from datetime import datetime

from clinic_booking.core.db import get_session
from clinic_booking.services.slot_service import local_naive_now

__all__ = ["get_session", "get_now"]


def get_now() -> datetime:
    """Current clinic wall-clock time; overridable so availability can be pinned in tests."""
    return local_naive_now()
