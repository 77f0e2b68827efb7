from dataclasses import dataclass
from datetime import datetime


class BookingError(Exception):
    """Base class for booking errors surfaced to the caller"""


class ValidationError(BookingError):
    """Input the user can correct: bad phone, too many guests, no slot, bad hours"""


class NotFoundError(BookingError):
    """Restaurant, table or booking does not exist"""


class InvalidTransitionError(BookingError):
    """Status change not allowed from the booking's current status"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change booking status from {current} to {requested}")


@dataclass
class ConflictWarning:
    """A later booking on the same table starts soon after the requested time.

    Not an error: the guest has to confirm before the request is stored.
    """
    next_booking_at: datetime
    minutes_available: int

    @property
    def message(self) -> str:
        hours, minutes = divmod(self.minutes_available, 60)
        duration = f"{hours} h {minutes} min" if minutes else f"{hours} h"
        return (
            f"This table is booked at {self.next_booking_at.strftime('%H:%M')}. "
            f"You will only have {duration}. Continue?"
        )
