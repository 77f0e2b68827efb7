from datetime import datetime, date
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
import logging
import re

from ..config import settings
from ..errors import ConflictWarning, InvalidTransitionError, NotFoundError, ValidationError
from ..models import Booking, BookingStatus, Restaurant
from ..schemas import TableElement, layout_adapter
from ..timeutil import validate_work_hours
from . import lifecycle
from .availability import booking_datetime, compute_available_slots, find_conflict_warning
from .table_status import classify_tables, count_free_tables, current_booking, occupied_tables

logger = logging.getLogger(__name__)

PHONE_DIGITS = 11  # +7 and ten digits


def normalize_phone(phone: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) != PHONE_DIGITS:
        raise ValidationError("Please enter a valid phone number: +7 (XXX) XXX-XX-XX")
    return f"+{digits}"


def restaurant_tables(restaurant: Restaurant) -> List[TableElement]:
    """Tables from the stored layout; text and decorations are skipped"""
    elements = layout_adapter.validate_python(restaurant.layout or [])
    return [el for el in elements if isinstance(el, TableElement)]


class BookingService:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------
    # Restaurants
    # ---------------------------

    def list_restaurants(self) -> List[Restaurant]:
        return self.db.query(Restaurant).order_by(Restaurant.id).all()

    def get_restaurant(self, restaurant_id: int) -> Restaurant:
        restaurant = self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
        if not restaurant:
            raise NotFoundError(f"Restaurant {restaurant_id} not found")
        return restaurant

    def create_restaurant(self, name: str, work_starts: Optional[str] = None, work_ends: Optional[str] = None,
                          address: Optional[str] = None, photo_url: Optional[str] = None) -> Restaurant:
        if not (name or "").strip():
            raise ValidationError("Restaurant name is required")
        work_starts = work_starts or settings.default_work_starts
        work_ends = work_ends or settings.default_work_ends
        validate_work_hours(work_starts, work_ends)

        restaurant = Restaurant(
            name=name.strip(),
            address=address,
            photo_url=photo_url,
            work_starts=work_starts,
            work_ends=work_ends,
            layout=[],
            floors=[],
        )
        self.db.add(restaurant)
        self.db.commit()
        self.db.refresh(restaurant)
        logger.info(f"Created restaurant #{restaurant.id} '{restaurant.name}' ({work_starts}-{work_ends})")
        return restaurant

    def set_work_hours(self, restaurant_id: int, work_starts: str, work_ends: str) -> Restaurant:
        restaurant = self.get_restaurant(restaurant_id)
        validate_work_hours(work_starts, work_ends)
        restaurant.work_starts = work_starts
        restaurant.work_ends = work_ends
        self.db.commit()
        self.db.refresh(restaurant)
        return restaurant

    def update_layout(self, restaurant_id: int, layout: list, floors: Optional[list] = None) -> Restaurant:
        restaurant = self.get_restaurant(restaurant_id)
        restaurant.layout = [el.model_dump() for el in layout]
        if floors is not None:
            restaurant.floors = [f.model_dump() for f in floors]
        self.db.commit()
        self.db.refresh(restaurant)
        return restaurant

    def get_table(self, restaurant: Restaurant, table_id: str) -> TableElement:
        for table in restaurant_tables(restaurant):
            if table.id == table_id:
                return table
        raise NotFoundError(f"Table {table_id} not found")

    def free_table_summary(self, restaurant: Restaurant, now: Optional[datetime] = None) -> Tuple[int, int]:
        """(total tables, tables free right now)"""
        now = now or datetime.now()
        tables = restaurant_tables(restaurant)
        free = count_free_tables(tables, restaurant.bookings, now, settings.assumed_stay_minutes)
        return len(tables), free

    # ---------------------------
    # Bookings
    # ---------------------------

    def list_bookings(self, restaurant_id: int) -> List[Booking]:
        return self.db.query(Booking).filter(
            Booking.restaurant_id == restaurant_id
        ).order_by(Booking.date_time).all()

    def list_bookings_for_table(self, restaurant_id: int, table_id: str) -> List[Booking]:
        return self.db.query(Booking).filter(
            Booking.restaurant_id == restaurant_id,
            Booking.table_id == table_id,
        ).order_by(Booking.date_time).all()

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def available_slots(self, restaurant_id: int, table_id: str, selected_date: date,
                        now: Optional[datetime] = None) -> List[str]:
        """Offerable slots for one table, recomputed from the current bookings"""
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        table = self.get_table(restaurant, table_id)
        return compute_available_slots(
            table,
            selected_date,
            restaurant.work_starts,
            restaurant.work_ends,
            self.list_bookings_for_table(restaurant_id, table_id),
            now,
            slot_interval_minutes=settings.slot_interval_minutes,
            min_lead_minutes=settings.min_lead_minutes,
            min_gap_minutes=settings.min_gap_minutes,
            min_stay_minutes=settings.min_stay_minutes,
            pending_blocks=settings.pending_blocks_slots,
        )

    def upcoming_for_table(self, restaurant_id: int, table_id: str, now: Optional[datetime] = None) -> List[Booking]:
        """Pending and confirmed bookings still ahead, for the booking dialog"""
        now = now or datetime.now()
        return [
            b for b in self.list_bookings_for_table(restaurant_id, table_id)
            if b.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED) and b.date_time >= now
        ]

    def submit_booking(
        self,
        restaurant_id: int,
        table_id: str,
        guest_name: str,
        guest_phone: str,
        guest_count: int,
        booking_date: date,
        slot: Optional[str],
        confirm_conflict: bool = False,
        now: Optional[datetime] = None,
    ) -> Tuple[Optional[Booking], Optional[ConflictWarning]]:
        """
        Store a guest booking request as PENDING.

        Returns (booking, None) on success. When a later booking on the table
        starts soon after the requested time and the guest has not confirmed
        yet, nothing is stored and (None, warning) is returned.
        """
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        table = self.get_table(restaurant, table_id)

        guest_name = (guest_name or "").strip()
        if not guest_name or not (guest_phone or "").strip():
            raise ValidationError("Please enter your name and phone number")
        phone = normalize_phone(guest_phone)
        if guest_count < 1:
            raise ValidationError("At least one guest is required")
        if guest_count > table.seats:
            raise ValidationError(f"This table seats at most {table.seats} guests")

        slots = self.available_slots(restaurant_id, table_id, booking_date, now)
        if not slots:
            raise ValidationError("No available slots for this date")
        if not slot:
            raise ValidationError("No time slot selected")
        if slot not in slots:
            raise ValidationError(f"{slot} is no longer available")

        requested_at = booking_datetime(booking_date, slot, restaurant.work_starts)
        warning = find_conflict_warning(
            table,
            requested_at,
            self.list_bookings_for_table(restaurant_id, table_id),
            settings.conflict_warning_minutes,
            pending_blocks=settings.pending_blocks_slots,
        )
        if warning and not confirm_conflict:
            return None, warning

        booking = lifecycle.new_request(
            now,
            restaurant_id=restaurant.id,
            table_id=table.id,
            table_label=table.label,
            guest_name=guest_name,
            guest_phone=phone,
            guest_count=guest_count,
            date_time=requested_at,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Booking request #{booking.id} for table {table.id} at {requested_at:%Y-%m-%d %H:%M}")
        return booking, warning

    def seat_walk_in(self, restaurant_id: int, table_id: str, guest_count: int = 1,
                     guest_name: str = "Walk-in", guest_phone: str = "",
                     now: Optional[datetime] = None) -> Booking:
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        table = self.get_table(restaurant, table_id)
        if guest_count < 1 or guest_count > table.seats:
            raise ValidationError(f"This table seats at most {table.seats} guests")

        booking = lifecycle.new_walk_in(
            now,
            restaurant_id=restaurant.id,
            table_id=table.id,
            table_label=table.label,
            guest_name=guest_name or "Walk-in",
            guest_phone=guest_phone,
            guest_count=guest_count,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Walk-in #{booking.id} seated at table {table.id}")
        return booking

    def set_booking_status(self, booking_id: int, status: str, reason: Optional[str] = None) -> Booking:
        booking = self.get_booking(booking_id)
        try:
            requested = BookingStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status {status!r}") from None

        if not lifecycle.can_transition(booking.status, requested):
            raise InvalidTransitionError(booking.status, requested.value)

        if requested == BookingStatus.DECLINED and booking.status == BookingStatus.CONFIRMED:
            reason = reason or "Cancelled by staff"
        lifecycle.apply_status(booking, requested, reason)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Booking #{booking.id} -> {booking.status}")
        return booking

    def free_table(self, restaurant_id: int, table_id: str, now: Optional[datetime] = None) -> Booking:
        """Complete the booking currently holding the table"""
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        table = self.get_table(restaurant, table_id)
        booking = current_booking(table, self.list_bookings_for_table(restaurant_id, table_id), now)
        if booking is None:
            raise NotFoundError(f"Table {table_id} has no current booking")
        return self.set_booking_status(booking.id, BookingStatus.COMPLETED)

    def expire_stale_bookings(self, now: Optional[datetime] = None) -> List[Booking]:
        """Decline pending requests nobody answered within the expiry window"""
        now = now or datetime.now()
        pending = self.db.query(Booking).filter(Booking.status == BookingStatus.PENDING.value).all()
        expired = [b for b in pending if lifecycle.is_expired(b, now, settings.pending_expiry_seconds)]
        for booking in expired:
            lifecycle.decline(booking, lifecycle.EXPIRED_REASON)
        if expired:
            self.db.commit()
            for booking in expired:
                self.db.refresh(booking)
            logger.info(f"Expired {len(expired)} pending booking request(s)")
        return expired

    # ---------------------------
    # Staff views
    # ---------------------------

    def table_statuses(self, restaurant_id: int, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        return classify_tables(
            restaurant_tables(restaurant),
            self.list_bookings(restaurant_id),
            now,
            settings.lookahead_minutes,
        )

    def pending_requests(self, restaurant_id: int) -> List[Booking]:
        """Request queue, oldest first"""
        return self.db.query(Booking).filter(
            Booking.restaurant_id == restaurant_id,
            Booking.status == BookingStatus.PENDING.value,
        ).order_by(Booking.created_at).all()

    def occupied(self, restaurant_id: int, now: Optional[datetime] = None) -> list:
        now = now or datetime.now()
        restaurant = self.get_restaurant(restaurant_id)
        return occupied_tables(restaurant_tables(restaurant), self.list_bookings(restaurant_id), now)

    def upcoming_confirmed(self, restaurant_id: int, now: Optional[datetime] = None) -> List[Booking]:
        now = now or datetime.now()
        return self.db.query(Booking).filter(
            Booking.restaurant_id == restaurant_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.date_time > now,
        ).order_by(Booking.date_time).all()
