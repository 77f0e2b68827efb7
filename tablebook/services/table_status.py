import enum
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from ..models import BookingStatus

SEATED_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.OCCUPIED)
UPCOMING_STATUSES = SEATED_STATUSES + (BookingStatus.PENDING,)


class TableStatus(str, enum.Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    CONFIRMED = "confirmed"  # shown as occupied on the floor plan


def _latest_due(table_id: str, bookings: Iterable, now: datetime, statuses: tuple):
    due = [
        b for b in bookings
        if b.table_id == table_id and b.status in statuses and b.date_time <= now
    ]
    # The most recent activation wins; older ones are presumed finished
    return max(due, key=lambda b: b.date_time) if due else None


def current_booking(table, bookings: Iterable, now: datetime):
    """The confirmed/occupied booking currently holding the table, if any"""
    return _latest_due(table.id, bookings, now, SEATED_STATUSES)


def next_booking(table, bookings: Iterable, now: datetime):
    upcoming = [
        b for b in bookings
        if b.table_id == table.id and b.status in UPCOMING_STATUSES and b.date_time > now
    ]
    return min(upcoming, key=lambda b: b.date_time) if upcoming else None


def classify_table_status(table, bookings: Iterable, now: datetime, lookahead_minutes: int = 60) -> TableStatus:
    """
    Floor-plan status of a table as of `now`.

    A due pending request wins over a seated guest. A table with nobody
    due is still shown as taken when its next booking starts within
    `lookahead_minutes`, so staff do not seat a walk-in there.
    """
    bookings = list(bookings)
    if _latest_due(table.id, bookings, now, (BookingStatus.PENDING,)) is not None:
        return TableStatus.PENDING
    if current_booking(table, bookings, now) is not None:
        return TableStatus.CONFIRMED

    upcoming = next_booking(table, bookings, now)
    if upcoming is not None and upcoming.date_time - now < timedelta(minutes=lookahead_minutes):
        return TableStatus.CONFIRMED
    return TableStatus.AVAILABLE


def classify_tables(tables: Iterable, bookings: Iterable, now: datetime, lookahead_minutes: int = 60) -> Dict[str, TableStatus]:
    bookings = list(bookings)
    return {
        table.id: classify_table_status(table, bookings, now, lookahead_minutes)
        for table in tables
    }


def occupied_tables(tables: Iterable, bookings: Iterable, now: datetime) -> List[tuple]:
    """(table, booking) pairs for every table with a current booking"""
    bookings = list(bookings)
    pairs = []
    for table in tables:
        booking = current_booking(table, bookings, now)
        if booking is not None:
            pairs.append((table, booking))
    return pairs


def count_free_tables(tables: Iterable, bookings: Iterable, now: datetime, assumed_stay_minutes: int = 90) -> int:
    """
    Rough count of tables free right now for the restaurant list. Bookings
    carry no duration, so a seated booking is assumed to last
    `assumed_stay_minutes`.
    """
    since = now - timedelta(minutes=assumed_stay_minutes)
    busy = {
        b.table_id for b in bookings
        if b.status in SEATED_STATUSES and since < b.date_time <= now
    }
    return sum(1 for t in tables if t.id not in busy)
