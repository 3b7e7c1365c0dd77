"""Facility catalog: lookup, filtered listing, sorting and admin CRUD."""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from reservations.core.errors import NotFoundError, ValidationError
from reservations.core.timeslots import to_minutes
from reservations.models.booking import Booking
from reservations.models.facility import Facility
from reservations.schemas.facility import FacilityCreate, FacilityFilter, FacilityUpdate
from reservations.services.audit_service import log_audit

logger = logging.getLogger(__name__)

_SORTS = {
    "name_asc": (lambda f: (f.name or "").lower(), False),
    "name_desc": (lambda f: (f.name or "").lower(), True),
    "price_asc": (lambda f: f.price_hourly or 0, False),
    "price_desc": (lambda f: f.price_hourly or 0, True),
    "rating_desc": (lambda f: f.rating or 0, True),
    "capacity_desc": (lambda f: f.capacity_max or 0, True),
}


def get_facility(db: Session, facility_id: str) -> Facility:
    f = db.get(Facility, facility_id)
    if not f:
        raise NotFoundError("facility not found", facilityId=facility_id)
    return f


def list_facilities(db: Session, flt: FacilityFilter | None = None) -> list[Facility]:
    """All filter fields are ANDed; ``amenities`` requires every listed amenity,
    ``search`` matches any of name/description/location/city/state."""
    flt = flt or FacilityFilter()
    q = db.query(Facility)
    if flt.category and flt.category != "all":
        q = q.filter(Facility.category == flt.category)
    if flt.status and flt.status != "all":
        q = q.filter(Facility.status == flt.status)
    if flt.minCapacity:
        q = q.filter(Facility.capacity_max >= flt.minCapacity)
    if flt.maxPrice:
        q = q.filter(Facility.price_hourly <= flt.maxPrice)
    if flt.city:
        q = q.filter(func.lower(Facility.city) == flt.city.strip().lower())
    if flt.state:
        q = q.filter(func.lower(Facility.state) == flt.state.strip().lower())
    if flt.search and flt.search.strip():
        term = flt.search.strip().lower()
        # % and _ in user text are literal characters
        q = q.filter(or_(
            func.lower(Facility.name).contains(term, autoescape=True),
            func.lower(Facility.description).contains(term, autoescape=True),
            func.lower(Facility.location).contains(term, autoescape=True),
            func.lower(func.coalesce(Facility.city, "")).contains(term, autoescape=True),
            func.lower(func.coalesce(Facility.state, "")).contains(term, autoescape=True),
        ))
    items = q.order_by(Facility.created_at.asc(), Facility.id.asc()).all()
    if flt.amenities:
        wanted = set(flt.amenities)
        items = [f for f in items if wanted.issubset(set(f.amenities or []))]
    return sort_facilities(items, flt.sort)


def sort_facilities(items: list[Facility], sort: str | None) -> list[Facility]:
    if not sort:
        return list(items)
    if sort not in _SORTS:
        raise ValidationError(f"unknown sort '{sort}'", reason="InvalidSort")
    key, reverse = _SORTS[sort]
    # sorted() is stable, so ties keep catalog order
    return sorted(items, key=key, reverse=reverse)


def list_categories(db: Session) -> list[dict]:
    rows = (
        db.query(Facility.category, func.count(Facility.id))
        .group_by(Facility.category)
        .order_by(Facility.category.asc())
        .all()
    )
    return [{"category": c, "count": int(n)} for c, n in rows]


def _apply(f: Facility, data: dict) -> None:
    simple = {
        "name": "name", "description": "description", "category": "category",
        "location": "location", "city": "city", "state": "state",
        "amenities": "amenities", "images": "images", "rules": "rules",
        "features": "features", "rating": "rating", "reviewCount": "review_count",
        "status": "status",
    }
    for key, attr in simple.items():
        if key in data and data[key] is not None:
            setattr(f, attr, data[key])
    # nested objects merge key by key into the current values
    nested = {
        "capacity": {"min": "capacity_min", "max": "capacity_max"},
        "pricing": {"hourly": "price_hourly", "halfDay": "price_half_day", "fullDay": "price_full_day"},
        "operatingHours": {"start": "open_time", "end": "close_time"},
    }
    for key, fields in nested.items():
        part = data.get(key) or {}
        for sub, attr in fields.items():
            if part.get(sub) is not None:
                setattr(f, attr, part[sub])

    if f.capacity_min is not None and f.capacity_max is not None and f.capacity_min > f.capacity_max:
        raise ValidationError("capacity.min must be <= capacity.max", reason="InvalidCapacity")
    if f.open_time and f.close_time and to_minutes(f.open_time) >= to_minutes(f.close_time):
        raise ValidationError("operatingHours.start must be before operatingHours.end", reason="InvalidOperatingHours")


def create_facility(db: Session, body: FacilityCreate, actor: str) -> Facility:
    f = Facility(id=str(uuid.uuid4()))
    _apply(f, body.model_dump())
    db.add(f)
    log_audit(db, actor, "facility.create", "facility", f.id, {"name": f.name, "category": f.category})
    db.commit()
    db.refresh(f)
    logger.info("facility created id=%s name=%r", f.id, f.name)
    return f


def update_facility(db: Session, facility_id: str, body: FacilityUpdate, actor: str) -> Facility:
    f = get_facility(db, facility_id)
    data = body.model_dump(exclude_unset=True)
    try:
        _apply(f, data)
    except ValidationError:
        db.rollback()
        raise
    f.updated_at = datetime.now(timezone.utc)
    log_audit(db, actor, "facility.update", "facility", f.id, {"fields": sorted(data)})
    db.commit()
    db.refresh(f)
    return f


def delete_facility(db: Session, facility_id: str, actor: str) -> dict:
    """Bookings are not touched; they keep their facility name snapshot."""
    f = get_facility(db, facility_id)
    orphaned = db.query(func.count(Booking.id)).filter(Booking.facility_id == f.id).scalar() or 0
    log_audit(db, actor, "facility.delete", "facility", f.id, {"name": f.name, "orphanedBookings": int(orphaned)})
    db.delete(f)
    db.commit()
    if orphaned:
        logger.warning("facility %s (%r) deleted; %d booking(s) keep a stale reference", facility_id, f.name, orphaned)
    return {"id": facility_id, "orphanedBookings": int(orphaned)}


def count_facilities_referencing(db: Session, city: str | None = None, state: str | None = None) -> int:
    q = db.query(func.count(Facility.id))
    if city is not None:
        q = q.filter(func.lower(Facility.city) == city.lower())
    if state is not None:
        q = q.filter(func.lower(Facility.state) == state.lower())
    return int(q.scalar() or 0)
