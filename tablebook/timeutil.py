"""
Clock helpers for restaurant work hours.

Work hours are a single daily shift given as two "HH:MM" strings. When the
closing time is not later than the opening time the shift runs past
midnight, and minutes after midnight are counted from 1440 upwards so the
whole shift stays on one increasing scale.
"""

from datetime import datetime
from typing import List, Tuple

from .errors import ValidationError

MINUTES_PER_DAY = 24 * 60


def parse_time_to_minutes(value: str) -> int:
    """Minutes since midnight for an "HH:MM" string"""
    try:
        parsed = datetime.strptime((value or "").strip(), "%H:%M")
    except ValueError:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from None
    return parsed.hour * 60 + parsed.minute


def format_minutes(minutes: int) -> str:
    """Inverse of parse_time_to_minutes; hours wrap modulo 24"""
    return f"{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def validate_work_hours(work_starts: str, work_ends: str) -> None:
    """Reject unparsable restaurant hours at setup time"""
    for label, value in (("work_starts", work_starts), ("work_ends", work_ends)):
        try:
            parse_time_to_minutes(value)
        except ValueError:
            raise ValidationError(f"{label} must be HH:MM, got {value!r}") from None


def shift_bounds(work_starts: str, work_ends: str) -> Tuple[int, int]:
    """(start, end) in minutes; end is pushed past 1440 for overnight shifts"""
    start = parse_time_to_minutes(work_starts)
    end = parse_time_to_minutes(work_ends)
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def is_within_work_hours(instant: datetime, work_starts: str, work_ends: str) -> bool:
    start = parse_time_to_minutes(work_starts)
    end = parse_time_to_minutes(work_ends)
    minutes = instant.hour * 60 + instant.minute

    if end <= start:
        # Overnight, e.g. 22:00 - 02:00; equal bounds mean open around the clock
        return minutes >= start or minutes < end
    return start <= minutes < end


def generate_time_slots(work_starts: str, work_ends: str, interval_minutes: int = 30) -> List[str]:
    """Every slot label from opening up to (not including) closing"""
    start, end = shift_bounds(work_starts, work_ends)
    return [format_minutes(m) for m in range(start, end, interval_minutes)]
