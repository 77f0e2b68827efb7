import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship

from .database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    OCCUPIED = "OCCUPIED"  # walk-ins or a confirmed guest who has arrived
    COMPLETED = "COMPLETED"


class Restaurant(Base):
    """A restaurant with a single daily shift and a floor layout"""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(200))
    photo_url = Column(String(300))
    work_starts = Column(String(5), nullable=False, default="10:00")  # HH:MM
    work_ends = Column(String(5), nullable=False, default="23:00")  # HH:MM, <= work_starts means overnight

    # Layout elements as written by the floor-plan editor (tables, text, decorations)
    layout = Column(JSON, nullable=False, default=list)
    floors = Column(JSON, nullable=False, default=list)

    bookings = relationship("Booking", back_populates="restaurant", order_by="Booking.date_time")


class Booking(Base):
    """A table booking request and its staff-driven status"""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    table_id = Column(String(64), nullable=False, index=True)
    table_label = Column(String(50), default="")
    guest_name = Column(String(100), nullable=False)
    guest_phone = Column(String(20), default="")
    guest_count = Column(Integer, nullable=False)
    # Restaurant-local wall clock, no timezone
    date_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    decline_reason = Column(Text)
    created_at = Column(DateTime, default=datetime.now)

    restaurant = relationship("Restaurant", back_populates="bookings")

    # Bookings have no duration and are never deleted; DECLINED and COMPLETED
    # rows stay for history.
