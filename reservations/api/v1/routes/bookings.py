from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from reservations.db.session import get_db
from reservations.api.deps import get_current_user
from reservations.core.errors import ValidationError
from reservations.core.timeslots import end_time
from reservations.models.booking import Booking
from reservations.models.user import User
from reservations.schemas.booking import BookingCreate, BookingUpdate, BookingOut, BookingSummaryOut, CancelIn, SlotCheckOut
from reservations.services import booking_service

router = APIRouter(tags=["bookings"])

VIEWS = ("all", "upcoming", "past", "cancelled")


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def booking_out(b: Booking, now: datetime | None = None) -> BookingOut:
    return BookingOut(
        bookingRef=b.booking_ref,
        id=b.id,
        facilityId=b.facility_id,
        facilityName=b.facility_name or "",
        facilityLocation=b.facility_location or "",
        date=b.date_str,
        timeSlot=b.time_slot,
        endTime=end_time(b.time_slot, b.duration_hours),
        duration=b.duration_hours,
        userEmail=b.user_email,
        userName=b.user_name or "",
        userPhone=b.user_phone or "",
        attendees=b.attendees,
        purpose=b.purpose or "",
        specialRequests=b.special_requests or "",
        equipment=list(b.equipment or []),
        totalAmount=b.total_amount or 0,
        status=b.status,
        canCancel=booking_service.can_cancel(b, now),
        cancelReason=b.cancel_reason or "",
        createdAt=_iso(b.created_at),
        updatedAt=_iso(b.updated_at),
        cancelledAt=_iso(b.cancelled_at),
    )


@router.post("/bookings", status_code=201)
def create_booking(body: BookingCreate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.create_booking(db, body, me)
    return {"success": True, "data": booking_out(b)}


@router.get("/bookings")
def my_bookings(view: str = "all", db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    """The caller's bookings; ``view`` picks one classified group."""
    if view not in VIEWS:
        raise ValidationError(f"view must be one of {', '.join(VIEWS)}", reason="InvalidView")
    items = booking_service.list_user_bookings(db, me.email)
    if view != "all":
        items = booking_service.classify(items)[view]
    return {"success": True, "data": [booking_out(b) for b in items]}


@router.get("/bookings/summary")
def my_booking_summary(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    items = booking_service.list_user_bookings(db, me.email)
    groups = booking_service.classify(items)
    out = BookingSummaryOut(
        total=len(items),
        counts={k: len(v) for k, v in groups.items()},
        upcoming=[booking_out(b) for b in groups["upcoming"]],
        past=[booking_out(b) for b in groups["past"]],
        cancelled=[booking_out(b) for b in groups["cancelled"]],
    )
    return {"success": True, "data": out}


@router.get("/bookings/availability")
def check_slot(facilityId: str, date: str, timeSlot: str, duration: int = 1, db: Session = Depends(get_db)):
    """Whether a slot is free for the given facility, date and start time."""
    booking_service.validate_date_time(date, timeSlot)
    if duration < 1:
        raise ValidationError("duration must be >= 1", reason="InvalidDuration")
    available = booking_service.is_time_slot_available(db, facilityId, date, timeSlot, duration)
    return {"success": True, "data": SlotCheckOut(facilityId=facilityId, date=date, timeSlot=timeSlot, duration=duration, available=available)}


@router.get("/bookings/{booking_ref}")
def get_booking(booking_ref: str, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return {"success": True, "data": booking_out(booking_service.get_booking_for(db, booking_ref, me))}


@router.patch("/bookings/{booking_ref}")
def update_booking(booking_ref: str, body: BookingUpdate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.update_booking(db, booking_ref, body, me)
    return {"success": True, "data": booking_out(b)}


@router.post("/bookings/{booking_ref}/cancel")
def cancel_booking(booking_ref: str, body: CancelIn | None = None, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.cancel_booking(db, booking_ref, me, reason=body.reason if body else "")
    return {"success": True, "data": booking_out(b)}
