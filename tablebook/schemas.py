from pydantic import BaseModel, Field, TypeAdapter
from datetime import date, datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

# ---------------------------
# Floor layout
# ---------------------------

class _Element(BaseModel):
    id: str
    x: float = 0
    y: float = 0
    width: float = 60
    height: float = 60
    rotation: float = 0
    floor_id: Optional[str] = None

class TableElement(_Element):
    type: Literal["table"] = "table"
    seats: int = Field(ge=1)
    shape: Literal["circle", "square"] = "square"
    label: str = ""

class TextElement(_Element):
    type: Literal["text"] = "text"
    label: str = ""
    font_size: Optional[int] = None

class DecoElement(_Element):
    type: Literal["wall", "bar", "plant", "window", "arrow", "stairs"]

LayoutElement = Annotated[Union[TableElement, TextElement, DecoElement], Field(discriminator="type")]

layout_adapter = TypeAdapter(List[LayoutElement])

class Floor(BaseModel):
    id: str
    name: str

class LayoutUpdate(BaseModel):
    layout: List[LayoutElement]
    floors: Optional[List[Floor]] = None

# ---------------------------
# Restaurants
# ---------------------------

class WorkHours(BaseModel):
    work_starts: str = Field(examples=["10:00"])
    work_ends: str = Field(examples=["02:00"])

class RestaurantCreate(BaseModel):
    name: str
    address: Optional[str] = None
    photo_url: Optional[str] = None
    work_starts: Optional[str] = None
    work_ends: Optional[str] = None

class RestaurantSummary(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    photo_url: Optional[str] = None
    work_starts: str
    work_ends: str
    total_tables: int
    free_tables: int

class Restaurant(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    photo_url: Optional[str] = None
    work_starts: str
    work_ends: str
    layout: List[LayoutElement] = []
    floors: List[Floor] = []

    class Config:
        from_attributes = True

# ---------------------------
# Bookings
# ---------------------------

class BookingCreate(BaseModel):
    table_id: str
    guest_name: str
    guest_phone: str
    guest_count: int
    date: date
    time: Optional[str] = None  # slot "HH:MM" picked from the slots endpoint
    confirm_conflict: bool = False

class Booking(BaseModel):
    id: int
    restaurant_id: int
    table_id: str
    table_label: Optional[str] = None
    guest_name: str
    guest_phone: Optional[str] = None
    guest_count: int
    date_time: datetime
    status: str
    decline_reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ConflictWarning(BaseModel):
    next_booking_at: datetime
    minutes_available: int
    message: str

    class Config:
        from_attributes = True

class BookingResponse(BaseModel):
    success: bool
    message: str
    booking: Optional[Booking] = None
    warning: Optional[ConflictWarning] = None

class StatusUpdate(BaseModel):
    status: str
    decline_reason: Optional[str] = None

class WalkIn(BaseModel):
    guest_count: int = 1
    guest_name: str = "Walk-in"
    guest_phone: str = ""

class SlotsResponse(BaseModel):
    table_id: str
    date: date
    slots: List[str]

class PendingRequest(BaseModel):
    booking: Booking
    seconds_left: int
    countdown: str

class OccupiedTable(BaseModel):
    table_id: str
    table_label: str
    booking: Booking

class TableStatusResponse(BaseModel):
    now: datetime
    statuses: Dict[str, str]

class CleanupResponse(BaseModel):
    updated: int
    bookings: List[Booking]
