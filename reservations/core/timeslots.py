"""Date and HH:MM helpers shared by schemas, services and the worker.

Booking times are naive local wall-clock values; no timezone conversion is
applied anywhere.
"""
import re
from datetime import date, datetime, timedelta

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 1440


def parse_date(date_str: str) -> date:
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValueError("date must be YYYY-MM-DD")


def is_hhmm(value: str) -> bool:
    return bool(value) and bool(_HHMM.match(value))


def to_minutes(hhmm: str) -> int:
    if not is_hhmm(hhmm):
        raise ValueError("time must be HH:MM")
    hh, mm = map(int, hhmm.split(":"))
    return hh * 60 + mm


def from_minutes(total: int) -> str:
    eh, em = divmod(total, 60)
    return f"{eh:02d}:{em:02d}"


def end_time(start_hhmm: str, duration_hours: int) -> str:
    """End of a booking as HH:MM; 24:00 means midnight at the end of the day."""
    return from_minutes(to_minutes(start_hhmm) + duration_hours * 60)


def booking_start(date_str: str, time_slot: str) -> datetime:
    return datetime.strptime(f"{date_str}T{time_slot}", "%Y-%m-%dT%H:%M")


def booking_end(date_str: str, time_slot: str, duration_hours: int) -> datetime:
    return booking_start(date_str, time_slot) + timedelta(hours=duration_hours)


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open [start, end) minute ranges."""
    return start_a < end_b and start_b < end_a


def hourly_slots(open_hhmm: str, close_hhmm: str) -> list[str]:
    """Start times from opening (inclusive) to closing (exclusive), one per hour."""
    start, stop = to_minutes(open_hhmm), to_minutes(close_hhmm)
    return [from_minutes(m) for m in range(start, stop, 60)]
