import logging
from datetime import datetime

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from reservations.db.session import SessionLocal
from reservations.services import booking_service

logger = logging.getLogger(__name__)


def complete_past_bookings(now: datetime | None = None) -> dict:
    """confirmed -> completed for bookings that have ended. Run periodically via Celery beat."""
    db: Session = SessionLocal()
    try:
        try:
            done = booking_service.complete_past_bookings(db, now=now)
        except (ProgrammingError, OperationalError):
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            logger.warning("completion sweep skipped: bookings table missing")
            return {"skipped": True, "reason": "missing_tables"}
        return {"completed": done}
    finally:
        db.close()
