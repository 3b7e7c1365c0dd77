from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from reservations.db.session import Base

class State(Base):
    __tablename__ = "states"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(2), nullable=False)
    cities_csv: Mapped[str] = mapped_column(String(4000), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def cities(self) -> list[str]:
        return [c.strip() for c in (self.cities_csv or "").split(",") if c.strip()]

    @cities.setter
    def cities(self, values: list[str]) -> None:
        self.cities_csv = ",".join(values or [])
