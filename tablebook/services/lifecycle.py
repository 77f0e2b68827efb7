"""
Booking status transitions.

    PENDING   -> CONFIRMED | DECLINED
    CONFIRMED -> OCCUPIED | DECLINED | COMPLETED
    OCCUPIED  -> COMPLETED

DECLINED and COMPLETED are terminal. A walk-in starts directly as OCCUPIED.
The helpers here only apply a change; checking it against the table above
is left to the persistence layer.
"""

from datetime import datetime
from typing import Optional

from ..errors import ValidationError
from ..models import Booking, BookingStatus

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.DECLINED},
    BookingStatus.CONFIRMED: {BookingStatus.OCCUPIED, BookingStatus.DECLINED, BookingStatus.COMPLETED},
    BookingStatus.OCCUPIED: {BookingStatus.COMPLETED},
    BookingStatus.DECLINED: set(),
    BookingStatus.COMPLETED: set(),
}

EXPIRED_REASON = "Request was not answered in time"


def can_transition(current: str, requested: str) -> bool:
    return BookingStatus(requested) in ALLOWED_TRANSITIONS[BookingStatus(current)]


def new_request(now: datetime, **fields) -> Booking:
    """Guest booking request awaiting staff"""
    return Booking(status=BookingStatus.PENDING.value, created_at=now, **fields)


def new_walk_in(now: datetime, **fields) -> Booking:
    """Guest seated by staff without a prior request"""
    return Booking(status=BookingStatus.OCCUPIED.value, date_time=now, created_at=now, **fields)


def apply_status(booking: Booking, status: str, reason: Optional[str] = None) -> Booking:
    status = BookingStatus(status)
    if status == BookingStatus.DECLINED:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A decline reason is required")
        booking.decline_reason = reason
    else:
        booking.decline_reason = None
    booking.status = status.value
    return booking


def confirm(booking: Booking) -> Booking:
    return apply_status(booking, BookingStatus.CONFIRMED)


def decline(booking: Booking, reason: str) -> Booking:
    return apply_status(booking, BookingStatus.DECLINED, reason)


def complete(booking: Booking) -> Booking:
    return apply_status(booking, BookingStatus.COMPLETED)


def seconds_left(created_at: datetime, now: datetime, window_seconds: int = 180) -> int:
    """Countdown for a pending request; never negative"""
    elapsed = (now - created_at).total_seconds()
    return int(max(0.0, window_seconds - elapsed))


def format_countdown(seconds: int) -> str:
    minutes, seconds = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{seconds:02d}"


def is_expired(booking: Booking, now: datetime, window_seconds: int = 180) -> bool:
    if booking.status != BookingStatus.PENDING or booking.created_at is None:
        return False
    return (now - booking.created_at).total_seconds() > window_seconds
