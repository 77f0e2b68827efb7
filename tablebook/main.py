from fastapi import FastAPI, Depends, HTTPException
from sqlalchemy.orm import Session
from datetime import datetime, date
from typing import List
import logging

from .config import settings
from .database import get_db, init_db
from .errors import BookingError, InvalidTransitionError, NotFoundError, ValidationError
from .schemas import (
    Booking, BookingCreate, BookingResponse, CleanupResponse, ConflictWarning,
    LayoutUpdate, OccupiedTable, PendingRequest, Restaurant, RestaurantCreate,
    RestaurantSummary, SlotsResponse, StatusUpdate, TableStatusResponse, WalkIn, WorkHours,
)
from .services import lifecycle
from .services.booking_service import BookingService
from .sweeper import ExpirySweeper

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Table Booking",
    description="Restaurant floor plans, table booking requests and staff seating",
    version="1.0.0"
)

sweeper = ExpirySweeper(interval=settings.expiry_sweep_seconds)


def _http_error(e: BookingError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Unhandled booking error: {e}")
    return HTTPException(status_code=500, detail=str(e))


@app.on_event("startup")
async def startup_event():
    """Initialize database and start the pending-request expiry sweep"""
    init_db()
    if settings.expiry_sweep_enabled:
        sweeper.start()

@app.on_event("shutdown")
async def shutdown_event():
    await sweeper.stop()

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}

# ---------------------------
# Restaurants
# ---------------------------

@app.get("/api/restaurants", response_model=List[RestaurantSummary])
async def list_restaurants(db: Session = Depends(get_db)):
    """All restaurants with a rough count of tables free right now"""
    service = BookingService(db)
    summaries = []
    for r in service.list_restaurants():
        total, free = service.free_table_summary(r)
        summaries.append(RestaurantSummary(
            id=r.id,
            name=r.name,
            address=r.address,
            photo_url=r.photo_url,
            work_starts=r.work_starts,
            work_ends=r.work_ends,
            total_tables=total,
            free_tables=free,
        ))
    return summaries

@app.post("/api/restaurants", response_model=Restaurant, status_code=201)
async def create_restaurant(data: RestaurantCreate, db: Session = Depends(get_db)):
    try:
        return BookingService(db).create_restaurant(
            data.name, data.work_starts, data.work_ends, data.address, data.photo_url
        )
    except BookingError as e:
        raise _http_error(e)

@app.get("/api/restaurants/{restaurant_id}", response_model=Restaurant)
async def get_restaurant(restaurant_id: int, db: Session = Depends(get_db)):
    try:
        return BookingService(db).get_restaurant(restaurant_id)
    except BookingError as e:
        raise _http_error(e)

@app.put("/api/restaurants/{restaurant_id}/hours", response_model=Restaurant)
async def set_work_hours(restaurant_id: int, hours: WorkHours, db: Session = Depends(get_db)):
    try:
        return BookingService(db).set_work_hours(restaurant_id, hours.work_starts, hours.work_ends)
    except BookingError as e:
        raise _http_error(e)

@app.put("/api/restaurants/{restaurant_id}/layout", response_model=Restaurant)
async def update_layout(restaurant_id: int, data: LayoutUpdate, db: Session = Depends(get_db)):
    """Store the layout drawn in the floor-plan editor"""
    try:
        return BookingService(db).update_layout(restaurant_id, data.layout, data.floors)
    except BookingError as e:
        raise _http_error(e)

# ---------------------------
# Guest booking
# ---------------------------

@app.get("/api/restaurants/{restaurant_id}/bookings", response_model=List[Booking])
async def list_bookings(restaurant_id: int, db: Session = Depends(get_db)):
    service = BookingService(db)
    try:
        service.get_restaurant(restaurant_id)
    except BookingError as e:
        raise _http_error(e)
    return service.list_bookings(restaurant_id)

@app.get("/api/restaurants/{restaurant_id}/tables/{table_id}/slots", response_model=SlotsResponse)
async def get_available_slots(restaurant_id: int, table_id: str, date: date, db: Session = Depends(get_db)):
    """Slots a guest can still request for this table on the given date"""
    try:
        slots = BookingService(db).available_slots(restaurant_id, table_id, date)
    except BookingError as e:
        raise _http_error(e)
    return SlotsResponse(table_id=table_id, date=date, slots=slots)

@app.get("/api/restaurants/{restaurant_id}/tables/{table_id}/bookings", response_model=List[Booking])
async def get_table_bookings(restaurant_id: int, table_id: str, db: Session = Depends(get_db)):
    """Upcoming pending/confirmed bookings shown in the booking dialog"""
    service = BookingService(db)
    try:
        service.get_table(service.get_restaurant(restaurant_id), table_id)
    except BookingError as e:
        raise _http_error(e)
    return service.upcoming_for_table(restaurant_id, table_id)

@app.post("/api/restaurants/{restaurant_id}/bookings", response_model=BookingResponse)
async def create_booking(restaurant_id: int, data: BookingCreate, db: Session = Depends(get_db)):
    """Submit a booking request; staff confirm or decline it later"""
    service = BookingService(db)
    try:
        booking, warning = service.submit_booking(
            restaurant_id,
            data.table_id,
            data.guest_name,
            data.guest_phone,
            data.guest_count,
            data.date,
            data.time,
            confirm_conflict=data.confirm_conflict,
        )
    except BookingError as e:
        raise _http_error(e)

    warning_out = None
    if warning:
        warning_out = ConflictWarning(
            next_booking_at=warning.next_booking_at,
            minutes_available=warning.minutes_available,
            message=warning.message,
        )
    if booking is None:
        return BookingResponse(success=False, message=warning.message, warning=warning_out)

    return BookingResponse(
        success=True,
        message="Your booking request has been sent!",
        booking=booking,
        warning=warning_out,
    )

# ---------------------------
# Staff
# ---------------------------

@app.get("/api/restaurants/{restaurant_id}/table-status", response_model=TableStatusResponse)
async def table_status(restaurant_id: int, db: Session = Depends(get_db)):
    """Floor-plan colour for every table, derived from bookings as of now"""
    now = datetime.now()
    try:
        statuses = BookingService(db).table_statuses(restaurant_id, now)
    except BookingError as e:
        raise _http_error(e)
    return TableStatusResponse(now=now, statuses={k: v.value for k, v in statuses.items()})

@app.get("/api/restaurants/{restaurant_id}/requests", response_model=List[PendingRequest])
async def pending_requests(restaurant_id: int, db: Session = Depends(get_db)):
    """Pending requests, oldest first, with the time left before they expire"""
    now = datetime.now()
    requests = []
    for b in BookingService(db).pending_requests(restaurant_id):
        left = lifecycle.seconds_left(b.created_at, now, settings.pending_expiry_seconds)
        requests.append(PendingRequest(booking=b, seconds_left=left, countdown=lifecycle.format_countdown(left)))
    return requests

@app.get("/api/restaurants/{restaurant_id}/occupied", response_model=List[OccupiedTable])
async def occupied_tables(restaurant_id: int, db: Session = Depends(get_db)):
    try:
        pairs = BookingService(db).occupied(restaurant_id)
    except BookingError as e:
        raise _http_error(e)
    return [OccupiedTable(table_id=t.id, table_label=t.label, booking=b) for t, b in pairs]

@app.get("/api/restaurants/{restaurant_id}/upcoming", response_model=List[Booking])
async def upcoming_confirmed(restaurant_id: int, db: Session = Depends(get_db)):
    return BookingService(db).upcoming_confirmed(restaurant_id)

@app.post("/api/restaurants/{restaurant_id}/tables/{table_id}/walk-in", response_model=Booking, status_code=201)
async def seat_walk_in(restaurant_id: int, table_id: str, data: WalkIn, db: Session = Depends(get_db)):
    try:
        return BookingService(db).seat_walk_in(
            restaurant_id, table_id, data.guest_count, data.guest_name, data.guest_phone
        )
    except BookingError as e:
        raise _http_error(e)

@app.post("/api/restaurants/{restaurant_id}/tables/{table_id}/free", response_model=Booking)
async def free_table(restaurant_id: int, table_id: str, db: Session = Depends(get_db)):
    """Mark the table's current booking as completed"""
    try:
        return BookingService(db).free_table(restaurant_id, table_id)
    except BookingError as e:
        raise _http_error(e)

@app.put("/api/bookings/{booking_id}/status", response_model=Booking)
async def update_booking_status(booking_id: int, data: StatusUpdate, db: Session = Depends(get_db)):
    try:
        return BookingService(db).set_booking_status(booking_id, data.status, data.decline_reason)
    except BookingError as e:
        raise _http_error(e)

@app.post("/api/bookings/cleanup-expired", response_model=CleanupResponse)
async def cleanup_expired(db: Session = Depends(get_db)):
    """Decline pending requests older than the expiry window right away"""
    expired = BookingService(db).expire_stale_bookings()
    return CleanupResponse(updated=len(expired), bookings=expired)
