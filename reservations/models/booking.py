from sqlalchemy import String, Integer, Float, DateTime, Text, JSON, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from reservations.db.session import Base

CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"
BOOKING_STATUSES = (CONFIRMED, COMPLETED, CANCELLED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # No two live bookings may hold the same facility/date/start.
        Index(
            "uq_bookings_live_slot",
            "facility_id", "date_str", "time_slot",
            unique=True,
            postgresql_where=text("status != 'cancelled'"),
            sqlite_where=text("status != 'cancelled'"),
        ),
        Index("ix_bookings_facility_date", "facility_id", "date_str"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_ref: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(80), unique=True, nullable=True)

    # weak reference; name/location are snapshots taken at creation
    facility_id: Mapped[str] = mapped_column(String(36), index=True)
    facility_name: Mapped[str] = mapped_column(String(200), default="")
    facility_location: Mapped[str] = mapped_column(String(200), default="")

    date_str: Mapped[str] = mapped_column(String(10), index=True)  # YYYY-MM-DD
    time_slot: Mapped[str] = mapped_column(String(5))  # HH:MM
    duration_hours: Mapped[int] = mapped_column(Integer, default=1)

    user_email: Mapped[str] = mapped_column(String(320), index=True)
    user_name: Mapped[str] = mapped_column(String(200), default="")
    user_phone: Mapped[str] = mapped_column(String(40), default="")

    attendees: Mapped[int] = mapped_column(Integer, default=1)
    purpose: Mapped[str] = mapped_column(String(500), default="")
    special_requests: Mapped[str] = mapped_column(Text, default="")
    equipment: Mapped[list] = mapped_column(JSON, default=list)

    total_amount: Mapped[float] = mapped_column(Float, default=0)

    status: Mapped[str] = mapped_column(String(20), default=CONFIRMED, index=True)  # confirmed, completed, cancelled
    cancel_reason: Mapped[str] = mapped_column(String(500), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
