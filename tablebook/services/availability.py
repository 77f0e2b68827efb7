from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple
import logging

from ..errors import ConflictWarning
from ..models import BookingStatus
from ..timeutil import format_minutes, parse_time_to_minutes, shift_bounds

logger = logging.getLogger(__name__)

OCCUPYING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.OCCUPIED)


def occupying_statuses(pending_blocks: bool = True) -> tuple:
    """Statuses that keep other guests away from a slot"""
    if pending_blocks:
        return OCCUPYING_STATUSES + (BookingStatus.PENDING,)
    return OCCUPYING_STATUSES


def shift_window(selected_date: date, work_starts: str, work_ends: str) -> Tuple[datetime, datetime]:
    """[shift_start, shift_end) for the shift that opens on selected_date"""
    start, end = shift_bounds(work_starts, work_ends)
    midnight = datetime.combine(selected_date, time.min)
    return midnight + timedelta(minutes=start), midnight + timedelta(minutes=end)


def compute_available_slots(
    table,
    selected_date: date,
    work_starts: str,
    work_ends: str,
    bookings: Iterable,
    now: datetime,
    *,
    slot_interval_minutes: int = 30,
    min_lead_minutes: int = 15,
    min_gap_minutes: int = 60,
    min_stay_minutes: int = 60,
    pending_blocks: bool = True,
) -> List[str]:
    """
    Slot start times ("HH:MM", ascending) that can still be offered for
    `table` on the shift opening on `selected_date`.

    A slot is dropped when it is less than `min_lead_minutes` away from
    `now`, so past dates and the elapsed part of a running shift offer
    nothing. It is also dropped when closer than `min_gap_minutes` to any
    occupying booking on the table, before or after it. No slot starts
    within `min_stay_minutes` of closing.
    """
    start, end = shift_bounds(work_starts, work_ends)
    shift_start, shift_end = shift_window(selected_date, work_starts, work_ends)
    statuses = occupying_statuses(pending_blocks)

    # Existing bookings on the same minute scale as the candidates
    taken = []
    for booking in bookings:
        if booking.table_id != table.id or booking.status not in statuses:
            continue
        if not (shift_start <= booking.date_time < shift_end):
            continue
        offset = int((booking.date_time - shift_start).total_seconds() // 60)
        taken.append(start + offset)

    earliest = now + timedelta(minutes=min_lead_minutes)

    slots = []
    for minutes in range(start, end - min_stay_minutes + 1, slot_interval_minutes):
        if shift_start + timedelta(minutes=minutes - start) < earliest:
            continue
        if any(abs(minutes - other) < min_gap_minutes for other in taken):
            continue
        slots.append(format_minutes(minutes))
    return slots


def booking_datetime(selected_date: date, slot: str, work_starts: str) -> datetime:
    """
    Instant a chosen slot is stored at. A slot earlier than opening time
    belongs to the part of an overnight shift after midnight, so it lands
    on the next calendar day.
    """
    slot_minutes = parse_time_to_minutes(slot)
    result = datetime.combine(selected_date, time.min) + timedelta(minutes=slot_minutes)
    if slot_minutes < parse_time_to_minutes(work_starts):
        result += timedelta(days=1)
    return result


def find_conflict_warning(
    table,
    requested_at: datetime,
    bookings: Iterable,
    horizon_minutes: int = 6 * 60,
    pending_blocks: bool = True,
) -> Optional[ConflictWarning]:
    """Warn when the next active booking on the table starts within the horizon"""
    upcoming = [
        b for b in bookings
        if b.table_id == table.id
        and b.status in occupying_statuses(pending_blocks)
        and b.date_time > requested_at
    ]
    if not upcoming:
        return None

    next_booking = min(upcoming, key=lambda b: b.date_time)
    minutes = int((next_booking.date_time - requested_at).total_seconds() // 60)
    if minutes >= horizon_minutes:
        return None

    logger.info(
        f"Booking at {requested_at:%Y-%m-%d %H:%M} on table {table.id} "
        f"leaves only {minutes} min before booking #{next_booking.id}"
    )
    return ConflictWarning(next_booking_at=next_booking.date_time, minutes_available=minutes)
