from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from reservations.db.session import get_db
from reservations.api.deps import require_admin
from reservations.api.v1.routes.bookings import booking_out
from reservations.models.user import User
from reservations.schemas.booking import CancelIn
from reservations.services import booking_service

router = APIRouter(tags=["admin"])

@router.get("/admin/users")
def list_users(role: str | None = None, q: str | None = None, limit: int = 50, offset: int = 0,
               db: Session = Depends(get_db),
               me: User = Depends(require_admin)):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if q:
        term = q.lower()
        query = query.filter(
            func.lower(User.email).contains(term, autoescape=True)
            | func.lower(User.full_name).contains(term, autoescape=True)
        )
    total = query.count()
    users = query.order_by(User.created_at.desc()).limit(min(limit, 200)).offset(max(offset, 0)).all()
    return {
        "success": True,
        "data": {
            "total": total,
            "items": [{"id": u.id, "email": u.email, "name": u.full_name, "role": u.role, "isActive": u.is_active,
                       "createdAt": u.created_at.isoformat()} for u in users],
        },
    }

@router.get("/admin/bookings")
def list_bookings(status: str = "", facilityId: str = "", date: str = "", q: str = "", limit: int = 200,
                  db: Session = Depends(get_db),
                  me: User = Depends(require_admin)):
    rows = booking_service.search_bookings(db, status=status, facility_id=facilityId, date_str=date, q=q, limit=limit)
    return {"success": True, "data": [booking_out(b) for b in rows]}

@router.get("/admin/metrics/overview")
def metrics_overview(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return {"success": True, "data": booking_service.booking_metrics(db)}

@router.post("/admin/bookings/complete-past")
def complete_past(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    """Run the confirmed -> completed sweep now instead of waiting for the worker."""
    return {"success": True, "data": {"completed": booking_service.complete_past_bookings(db)}}

@router.post("/admin/bookings/{booking_ref}/cancel")
def admin_cancel(booking_ref: str, body: CancelIn | None = None, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    b = booking_service.cancel_booking(db, booking_ref, me, reason=body.reason if body else "admin_cancel", enforce_window=False)
    return {"success": True, "data": booking_out(b)}

@router.post("/admin/bookings/{booking_ref}/complete")
def admin_complete(booking_ref: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    b = booking_service.complete_booking(db, booking_ref, me)
    return {"success": True, "data": booking_out(b)}

@router.get("/admin/facilities/{facility_id}/bookings")
def facility_bookings(facility_id: str, date: str = "", db: Session = Depends(get_db), me: User = Depends(require_admin)):
    """Bookings held against a facility id, including ones whose facility was deleted."""
    rows = booking_service.list_facility_bookings(db, facility_id, date_str=date or None)
    return {"success": True, "data": [booking_out(b) for b in rows]}
