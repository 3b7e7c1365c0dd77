from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from reservations.db.session import get_db
from reservations.api.deps import require_admin
from reservations.models.facility import Facility
from reservations.models.user import User
from reservations.schemas.facility import (
    FacilityCreate, FacilityUpdate, FacilityFilter, FacilityOut,
    CapacityOut, PricingOut, OperatingHoursOut, DayAvailabilityOut, SlotOut,
)
from reservations.services import facility_service, booking_service

router = APIRouter(tags=["facilities"])


def facility_out(f: Facility) -> FacilityOut:
    return FacilityOut(
        id=f.id,
        name=f.name,
        description=f.description or "",
        category=f.category,
        location=f.location or "",
        city=f.city,
        state=f.state,
        capacity=CapacityOut(min=f.capacity_min or 0, max=f.capacity_max),
        pricing=PricingOut(hourly=f.price_hourly or 0, halfDay=f.price_half_day or 0, fullDay=f.price_full_day or 0),
        operatingHours=OperatingHoursOut(start=f.open_time, end=f.close_time),
        amenities=list(f.amenities or []),
        images=list(f.images or []),
        rules=list(f.rules or []),
        features=list(f.features or []),
        rating=f.rating or 0,
        reviewCount=f.review_count or 0,
        status=f.status,
    )


@router.get("/facilities")
def list_facilities(
    category: Optional[str] = None,
    minCapacity: Optional[int] = None,
    maxPrice: Optional[float] = None,
    status: Optional[str] = None,
    amenities: List[str] = Query(default=[]),
    search: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    sort: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Catalog listing. Filters are ANDed; every listed amenity must be present."""
    flt = FacilityFilter(
        category=category, minCapacity=minCapacity, maxPrice=maxPrice, status=status,
        amenities=amenities, search=search, city=city, state=state, sort=sort,
    )
    items = facility_service.list_facilities(db, flt)
    return {"success": True, "data": [facility_out(f) for f in items]}


@router.get("/facilities/categories")
def list_categories(db: Session = Depends(get_db)):
    return {"success": True, "data": facility_service.list_categories(db)}


@router.get("/facilities/{facility_id}")
def get_facility(facility_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": facility_out(facility_service.get_facility(db, facility_id))}


@router.get("/facilities/{facility_id}/availability")
def facility_availability(facility_id: str, date: str, db: Session = Depends(get_db)):
    """Hourly slots inside operating hours for one day, flagged free or taken."""
    f = facility_service.get_facility(db, facility_id)
    slots = booking_service.day_availability(db, f, date)
    out = DayAvailabilityOut(facilityId=f.id, date=date, timeSlots=[SlotOut(**s) for s in slots])
    return {"success": True, "data": out}


@router.post("/facilities", status_code=201)
def create_facility(body: FacilityCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    f = facility_service.create_facility(db, body, actor=me.email)
    return {"success": True, "data": facility_out(f)}


@router.put("/facilities/{facility_id}")
def update_facility(facility_id: str, body: FacilityUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    f = facility_service.update_facility(db, facility_id, body, actor=me.email)
    return {"success": True, "data": facility_out(f)}


@router.delete("/facilities/{facility_id}")
def delete_facility(facility_id: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return {"success": True, "data": facility_service.delete_facility(db, facility_id, actor=me.email)}
