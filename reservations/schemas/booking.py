from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from reservations.core.timeslots import is_hhmm, parse_date


def _check_date(v: Optional[str]) -> Optional[str]:
    if v is not None:
        parse_date(v)
    return v


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is not None and not is_hhmm(v):
        raise ValueError("timeSlot must be HH:MM")
    return v


class BookingCreate(BaseModel):
    facilityId: str
    date: str  # YYYY-MM-DD
    timeSlot: str  # HH:MM
    duration: int = Field(1, ge=1)
    attendees: int = Field(1, ge=1)
    purpose: str = Field(min_length=1)
    specialRequests: str = ""
    equipment: List[str] = []
    # Booker identity; customers always book as themselves, admins may book on behalf of someone.
    userEmail: Optional[str] = None
    userName: Optional[str] = None
    userPhone: str = ""
    idempotencyKey: Optional[str] = Field(None, max_length=80)

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _check_date(v)

    @field_validator("timeSlot")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)


class BookingUpdate(BaseModel):
    date: Optional[str] = None
    timeSlot: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1)
    attendees: Optional[int] = Field(None, ge=1)
    purpose: Optional[str] = None
    specialRequests: Optional[str] = None
    equipment: Optional[List[str]] = None
    userPhone: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _check_date(v)

    @field_validator("timeSlot")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)


class CancelIn(BaseModel):
    reason: str = ""


class BookingOut(BaseModel):
    bookingRef: str
    id: str
    facilityId: str
    facilityName: str
    facilityLocation: str = ""
    date: str
    timeSlot: str
    endTime: str
    duration: int
    userEmail: str
    userName: str = ""
    userPhone: str = ""
    attendees: int
    purpose: str = ""
    specialRequests: str = ""
    equipment: List[str] = []
    totalAmount: float
    status: str
    canCancel: bool = False
    cancelReason: str = ""
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    cancelledAt: Optional[str] = None


class BookingSummaryOut(BaseModel):
    total: int
    counts: Dict[str, int]
    upcoming: List[BookingOut]
    past: List[BookingOut]
    cancelled: List[BookingOut]


class SlotCheckOut(BaseModel):
    facilityId: str
    date: str
    timeSlot: str
    duration: int
    available: bool
