"""Booking lifecycle: slot availability, creation, updates, cancellation,
completion and the read-time upcoming/past/cancelled classification.

Bookings move ``confirmed -> cancelled`` (user or admin action) or
``confirmed -> completed`` (admin action or the periodic sweep). Both are
terminal. Date/time values are naive local wall-clock times.
"""
import logging
import random
import string
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reservations.core.config import settings
from reservations.core.errors import (
    AlreadyCancelled,
    CancellationWindowExpired,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from reservations.core.timeslots import (
    MINUTES_PER_DAY,
    booking_end,
    booking_start,
    hourly_slots,
    overlaps,
    parse_date,
    to_minutes,
)
from reservations.models.booking import Booking, CANCELLED, COMPLETED, CONFIRMED
from reservations.models.facility import Facility
from reservations.models.user import User
from reservations.schemas.booking import BookingCreate, BookingUpdate
from reservations.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def make_booking_ref() -> str:
    return f"{settings.BOOKING_REF_PREFIX}-" + "".join(random.choices(string.ascii_uppercase + string.digits, k=8))


def _local_now() -> datetime:
    return datetime.now()


def validate_date_time(date_str: str, time_slot: str) -> None:
    try:
        parse_date(date_str)
        to_minutes(time_slot)
    except ValueError as e:
        raise ValidationError(str(e), reason="MalformedDateTime")


def _check_window(facility: Facility | None, time_slot: str, duration: int) -> None:
    if duration < 1:
        raise ValidationError("duration must be >= 1", reason="InvalidDuration")
    start = to_minutes(time_slot)
    end = start + duration * 60
    if end > MINUTES_PER_DAY:
        raise ValidationError("booking must end by midnight", reason="OutsideDay")
    if facility is not None and settings.ENFORCE_OPERATING_HOURS:
        if start < to_minutes(facility.open_time) or end > to_minutes(facility.close_time):
            raise ValidationError(
                f"booking must be within {facility.open_time}-{facility.close_time}",
                reason="OutsideOperatingHours",
            )


def _check_capacity(facility: Facility, attendees: int) -> None:
    if attendees < 1:
        raise ValidationError("attendees must be >= 1", reason="InvalidAttendees")
    if attendees > facility.capacity_max:
        raise ValidationError(
            f"attendees ({attendees}) exceed facility capacity ({facility.capacity_max})",
            reason="CapacityExceeded",
        )


def _lock_facility(db: Session, facility_id: str) -> Facility:
    # Row lock serializes check-then-insert per facility (no-op on SQLite).
    f = db.execute(
        select(Facility).where(Facility.id == facility_id).with_for_update()
    ).scalar_one_or_none()
    if not f:
        raise NotFoundError("facility not found", reason="FacilityNotFound", facilityId=facility_id)
    return f


def _find_replay(db: Session, key: str, email: str) -> Booking | None:
    prior = db.query(Booking).filter(Booking.idempotency_key == key).first()
    if prior and prior.user_email != email:
        raise ConflictError("idempotency key already used", idempotencyKey=key)
    return prior


def _ensure_owner(b: Booking, actor: User) -> None:
    if actor.is_admin:
        return
    if (b.user_email or "").lower() != (actor.email or "").lower():
        raise UnauthorizedError("booking belongs to another user")


# -------------------------
# AVAILABILITY
# -------------------------
def find_conflicts(
    db: Session,
    facility_id: str,
    date_str: str,
    time_slot: str,
    duration: int = 1,
    exclude_booking_id: str | None = None,
    mode: str | None = None,
) -> list[Booking]:
    """Live bookings that clash with the requested slot.

    ``slot`` mode compares start times only; ``interval`` mode compares
    [start, start + duration) hour ranges on the same day.
    """
    mode = mode or settings.SLOT_CONFLICT_MODE
    q = db.query(Booking).filter(
        Booking.facility_id == facility_id,
        Booking.date_str == date_str,
        Booking.status != CANCELLED,
    )
    if exclude_booking_id:
        q = q.filter(Booking.id != exclude_booking_id)
    if mode == "slot":
        return q.filter(Booking.time_slot == time_slot).all()
    start = to_minutes(time_slot)
    end = start + max(duration, 1) * 60
    return [
        b for b in q.all()
        if overlaps(start, end, to_minutes(b.time_slot), to_minutes(b.time_slot) + b.duration_hours * 60)
    ]


def is_slot_available(
    db: Session,
    facility_id: str,
    date_str: str,
    time_slot: str,
    duration: int = 1,
    exclude_booking_id: str | None = None,
    mode: str | None = None,
) -> bool:
    return not find_conflicts(db, facility_id, date_str, time_slot, duration, exclude_booking_id, mode)


# calendar UIs use this name to grey out taken slots
is_time_slot_available = is_slot_available


def day_availability(db: Session, facility: Facility, date_str: str) -> list[dict]:
    validate_date_time(date_str, facility.open_time)
    return [
        {"time": t, "available": is_slot_available(db, facility.id, date_str, t, 1)}
        for t in hourly_slots(facility.open_time, facility.close_time)
    ]


# -------------------------
# READ
# -------------------------
def get_booking(db: Session, booking_ref: str) -> Booking:
    b = db.query(Booking).filter(Booking.booking_ref == booking_ref).first()
    if not b:
        raise NotFoundError("booking not found", bookingRef=booking_ref)
    return b


def get_booking_for(db: Session, booking_ref: str, actor: User) -> Booking:
    b = get_booking(db, booking_ref)
    _ensure_owner(b, actor)
    return b


def list_user_bookings(db: Session, user_email: str) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.user_email == user_email.lower())
        .order_by(Booking.created_at.desc())
        .all()
    )


def list_facility_bookings(db: Session, facility_id: str, date_str: str | None = None) -> list[Booking]:
    q = db.query(Booking).filter(Booking.facility_id == facility_id)
    if date_str:
        q = q.filter(Booking.date_str == date_str)
    return q.order_by(Booking.date_str.asc(), Booking.time_slot.asc()).all()


def search_bookings(
    db: Session,
    status: str = "",
    facility_id: str = "",
    date_str: str = "",
    q: str = "",
    limit: int = 200,
) -> list[Booking]:
    query = db.query(Booking)
    if status:
        query = query.filter(Booking.status == status)
    if facility_id:
        query = query.filter(Booking.facility_id == facility_id)
    if date_str:
        query = query.filter(Booking.date_str == date_str)
    if q:
        term = q.lower()
        query = query.filter(or_(
            func.lower(Booking.booking_ref).contains(term, autoescape=True),
            func.lower(Booking.user_email).contains(term, autoescape=True),
            func.lower(Booking.user_name).contains(term, autoescape=True),
            func.lower(Booking.facility_name).contains(term, autoescape=True),
        ))
    return query.order_by(Booking.created_at.desc()).limit(min(max(limit, 1), 1000)).all()


def can_cancel(b: Booking, now: datetime | None = None, window_hours: int | None = None) -> bool:
    """True when the booking is confirmed and starts more than the window from now."""
    if b.status != CONFIRMED:
        return False
    now = now or _local_now()
    hours = settings.CANCELLATION_WINDOW_HOURS if window_hours is None else window_hours
    return booking_start(b.date_str, b.time_slot) - now > timedelta(hours=hours)


def classify(bookings: list[Booking], now: date | datetime | None = None) -> dict[str, list[Booking]]:
    """Split bookings into upcoming/past/cancelled at read time.

    A confirmed booking whose date has gone by lands in ``past`` even though
    its stored status is still ``confirmed``.
    """
    if now is None:
        now = _local_now()
    today = (now.date() if isinstance(now, datetime) else now).isoformat()
    upcoming = [b for b in bookings if b.status == CONFIRMED and b.date_str >= today]
    past = [b for b in bookings if b.status != CANCELLED and (b.date_str < today or b.status == COMPLETED)]
    cancelled = [b for b in bookings if b.status == CANCELLED]
    return {
        "upcoming": sorted(upcoming, key=lambda b: (b.date_str, b.time_slot)),
        "past": sorted(past, key=lambda b: (b.date_str, b.time_slot), reverse=True),
        "cancelled": cancelled,
    }


def booking_metrics(db: Session) -> dict:
    rows = db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
    counts = {s: int(n) for s, n in rows}
    revenue = (
        db.query(func.coalesce(func.sum(Booking.total_amount), 0))
        .filter(Booking.status != CANCELLED)
        .scalar()
    )
    return {
        "totalBookings": sum(counts.values()),
        "confirmed": counts.get(CONFIRMED, 0),
        "completed": counts.get(COMPLETED, 0),
        "cancelled": counts.get(CANCELLED, 0),
        "revenue": float(revenue or 0),
    }


# -------------------------
# WRITE
# -------------------------
def create_booking(db: Session, body: BookingCreate, actor: User) -> Booking:
    email = (actor.email or "").lower()
    if body.userEmail and body.userEmail.lower() != email:
        if not actor.is_admin:
            raise UnauthorizedError("customers can only book for themselves")
        email = body.userEmail.strip().lower()
    name = (body.userName or "").strip() or (actor.full_name if email == actor.email.lower() else "")
    phone = (body.userPhone or "").strip() or (actor.phone if email == actor.email.lower() else "")
    if not name:
        raise ValidationError("userName is required", reason="MissingField", field="userName")
    if not phone:
        raise ValidationError("userPhone is required", reason="MissingField", field="userPhone")
    if not body.purpose.strip():
        raise ValidationError("purpose is required", reason="MissingField", field="purpose")

    if body.idempotencyKey:
        prior = _find_replay(db, body.idempotencyKey, email)
        if prior:
            logger.info("booking %s replayed for idempotency key", prior.booking_ref)
            return prior

    validate_date_time(body.date, body.timeSlot)
    facility = _lock_facility(db, body.facilityId)
    _check_capacity(facility, body.attendees)
    _check_window(facility, body.timeSlot, body.duration)

    clashes = find_conflicts(db, facility.id, body.date, body.timeSlot, body.duration)
    if clashes:
        logger.info("slot conflict facility=%s date=%s slot=%s", facility.id, body.date, body.timeSlot)
        raise ConflictError(
            "time slot already booked",
            conflictsWith=[c.booking_ref for c in clashes],
        )

    # booking_ref must be unique
    for _ in range(10):
        ref = make_booking_ref()
        if not db.query(Booking.id).filter(Booking.booking_ref == ref).first():
            break
    else:
        raise ConflictError("could not allocate booking reference")

    booking = Booking(
        id=str(uuid.uuid4()),
        booking_ref=ref,
        idempotency_key=body.idempotencyKey,
        facility_id=facility.id,
        facility_name=facility.name,
        facility_location=facility.location or "",
        date_str=body.date,
        time_slot=body.timeSlot,
        duration_hours=body.duration,
        user_email=email,
        user_name=name,
        user_phone=phone,
        attendees=body.attendees,
        purpose=body.purpose.strip(),
        special_requests=body.specialRequests or "",
        equipment=list(body.equipment or []),
        total_amount=float(facility.price_hourly) * body.duration,
        status=CONFIRMED,
    )
    db.add(booking)
    log_audit(db, actor.email, "booking.create", "booking", booking.id, {
        "bookingRef": ref, "facilityId": facility.id, "date": body.date,
        "timeSlot": body.timeSlot, "duration": body.duration,
    })
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if body.idempotencyKey:
            # a concurrent request with the same key committed first
            prior = _find_replay(db, body.idempotencyKey, email)
            if prior:
                logger.info("booking %s replayed for idempotency key", prior.booking_ref)
                return prior
        raise ConflictError("time slot already booked")
    db.refresh(booking)
    logger.info("booking %s created facility=%s %s %s x%dh", ref, facility.id, body.date, body.timeSlot, body.duration)
    return booking


def update_booking(db: Session, booking_ref: str, body: BookingUpdate, actor: User) -> Booking:
    """Partial update. ``total_amount`` is left as computed at creation."""
    b = get_booking_for(db, booking_ref, actor)
    if b.status in (CANCELLED, COMPLETED):
        raise ConflictError(f"booking is {b.status}", status=b.status)

    data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    new_date = data.get("date", b.date_str)
    new_slot = data.get("timeSlot", b.time_slot)
    new_duration = data.get("duration", b.duration_hours)
    moved = (new_date, new_slot, new_duration) != (b.date_str, b.time_slot, b.duration_hours)

    if moved or "attendees" in data:
        validate_date_time(new_date, new_slot)
        facility = _lock_facility(db, b.facility_id)
        if "attendees" in data:
            _check_capacity(facility, data["attendees"])
        if moved:
            _check_window(facility, new_slot, new_duration)
            clashes = find_conflicts(db, b.facility_id, new_date, new_slot, new_duration, exclude_booking_id=b.id)
            if clashes:
                raise ConflictError("time slot already booked", conflictsWith=[c.booking_ref for c in clashes])

    b.date_str = new_date
    b.time_slot = new_slot
    b.duration_hours = new_duration
    if "attendees" in data:
        b.attendees = data["attendees"]
    if "purpose" in data:
        b.purpose = data["purpose"]
    if "specialRequests" in data:
        b.special_requests = data["specialRequests"]
    if "equipment" in data:
        b.equipment = list(data["equipment"])
    if "userPhone" in data:
        b.user_phone = data["userPhone"]
    b.updated_at = datetime.now(timezone.utc)

    log_audit(db, actor.email, "booking.update", "booking", b.id, {"bookingRef": b.booking_ref, "fields": sorted(data)})
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("time slot already booked")
    db.refresh(b)
    if "duration" in data:
        logger.info("booking %s duration changed to %dh; totalAmount kept at %s", b.booking_ref, b.duration_hours, b.total_amount)
    return b


def cancel_booking(
    db: Session,
    booking_ref: str,
    actor: User,
    reason: str = "",
    now: datetime | None = None,
    enforce_window: bool = True,
) -> Booking:
    b = get_booking_for(db, booking_ref, actor)
    if b.status == CANCELLED:
        raise AlreadyCancelled("booking is already cancelled")
    if b.status == COMPLETED:
        raise ConflictError("booking is completed")
    now = now or _local_now()
    if enforce_window and not can_cancel(b, now):
        logger.info("cancel rejected for %s: inside %dh window", b.booking_ref, settings.CANCELLATION_WINDOW_HOURS)
        raise CancellationWindowExpired(
            f"bookings can only be cancelled more than {settings.CANCELLATION_WINDOW_HOURS} hours before start"
        )

    stamp = datetime.now(timezone.utc)
    b.status = CANCELLED
    b.cancel_reason = reason or ""
    b.cancelled_at = stamp
    b.updated_at = stamp
    log_audit(db, actor.email, "booking.cancel", "booking", b.id, {
        "bookingRef": b.booking_ref, "reason": reason, "windowEnforced": enforce_window,
    })
    db.commit()
    db.refresh(b)
    logger.info("booking %s cancelled by %s", b.booking_ref, actor.email)
    return b


def complete_booking(db: Session, booking_ref: str, actor: User) -> Booking:
    b = get_booking(db, booking_ref)
    if b.status == CANCELLED:
        raise AlreadyCancelled("booking is cancelled")
    if b.status == COMPLETED:
        raise ConflictError("booking is already completed")
    b.status = COMPLETED
    b.updated_at = datetime.now(timezone.utc)
    log_audit(db, actor.email, "booking.complete", "booking", b.id, {"bookingRef": b.booking_ref})
    db.commit()
    db.refresh(b)
    return b


def complete_past_bookings(db: Session, now: datetime | None = None) -> int:
    """Mark confirmed bookings whose end time has passed as completed."""
    now = now or _local_now()
    candidates = (
        db.query(Booking)
        .filter(Booking.status == CONFIRMED, Booking.date_str <= now.date().isoformat())
        .all()
    )
    stamp = datetime.now(timezone.utc)
    done = 0
    for b in candidates:
        if booking_end(b.date_str, b.time_slot, b.duration_hours) <= now:
            b.status = COMPLETED
            b.updated_at = stamp
            log_audit(db, "system", "booking.complete", "booking", b.id, {"bookingRef": b.booking_ref, "sweep": True})
            done += 1
    if done:
        db.commit()
        logger.info("completion sweep marked %d booking(s) completed", done)
    return done
