# ============================================================================
# app/services/scheduling/slots.py
# Slot generation - pure business logic, fully testable
# ============================================================================
from datetime import date, datetime
from typing import Iterable, List, Sequence

from app.services.scheduling.intervals import TimeRange, format_time, minutes_from_time, subtract_ranges

DEFAULT_STEP_MINUTES = 30
DEFAULT_LEAD_MINUTES = 30


def total_duration(service, addons: Sequence = ()) -> int:
    """Service duration plus the duration of every selected add-on"""
    return (service.duration or 0) + sum(addon.duration or 0 for addon in addons)


def _align_up(minutes: int, step: int) -> int:
    return -(-minutes // step) * step


def generate_slots(
        day: date,
        duration_minutes: int,
        free: Iterable[TimeRange],
        booked: Iterable[TimeRange],
        now: datetime,
        step: int = DEFAULT_STEP_MINUTES,
        lead_minutes: int = DEFAULT_LEAD_MINUTES
) -> List[str]:
    """
    Offerable start times ("HH:mm") for an appointment of `duration_minutes` on `day`.

    Booked ranges are subtracted from the free intervals, then each remaining
    interval is walked on the `step` grid; a candidate is kept only when the
    whole appointment fits before the interval ends. On the current day,
    candidates earlier than `now + lead_minutes` are dropped.
    """
    if duration_minutes <= 0:
        raise ValueError("Appointment duration must be positive")

    today = now.date()
    if day < today:
        return []

    earliest = 0
    if day == today:
        earliest = minutes_from_time(now.time()) + lead_minutes
        if now.second or now.microsecond:
            earliest += 1

    slots = []
    for interval in subtract_ranges(free, booked):
        candidate = _align_up(max(interval.start, earliest), step)
        while candidate + duration_minutes <= interval.end:
            slots.append(candidate)
            candidate += step

    return [format_time(minutes) for minutes in sorted(slots)]
