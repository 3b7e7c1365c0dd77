from sqlalchemy import String, Integer, Float, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from reservations.db.session import Base

FACILITY_STATUSES = ("Available", "Limited", "Booked")


class Facility(Base):
    __tablename__ = "facilities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(60), index=True)  # meeting-room, training-room, event-hall, ...

    location: Mapped[str] = mapped_column(String(200), default="")  # building/floor
    city: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)

    capacity_min: Mapped[int] = mapped_column(Integer, default=1)
    capacity_max: Mapped[int] = mapped_column(Integer)

    price_hourly: Mapped[float] = mapped_column(Float, default=0)
    price_half_day: Mapped[float] = mapped_column(Float, default=0)
    price_full_day: Mapped[float] = mapped_column(Float, default=0)

    open_time: Mapped[str] = mapped_column(String(5), default="08:00")   # HH:MM
    close_time: Mapped[str] = mapped_column(String(5), default="20:00")  # HH:MM

    amenities: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    rules: Mapped[list] = mapped_column(JSON, default=list)
    features: Mapped[list] = mapped_column(JSON, default=list)

    rating: Mapped[float] = mapped_column(Float, default=0)
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default="Available", index=True)  # Available|Limited|Booked

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
