from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional

from reservations.core.timeslots import is_hhmm, to_minutes
from reservations.models.facility import FACILITY_STATUSES


class CapacityIn(BaseModel):
    min: int = Field(1, ge=0)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def check_range(self):
        if self.min > self.max:
            raise ValueError("capacity.min must be <= capacity.max")
        return self


class PricingIn(BaseModel):
    hourly: float = Field(ge=0)
    halfDay: float = Field(0, ge=0)
    fullDay: float = Field(0, ge=0)


class OperatingHoursIn(BaseModel):
    start: str = "08:00"
    end: str = "20:00"

    @model_validator(mode="after")
    def check_window(self):
        if not is_hhmm(self.start) or not is_hhmm(self.end):
            raise ValueError("operating hours must be HH:MM")
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError("operatingHours.start must be before operatingHours.end")
        return self


def _check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in FACILITY_STATUSES:
        raise ValueError(f"status must be one of {', '.join(FACILITY_STATUSES)}")
    return v


class FacilityCreate(BaseModel):
    name: str
    description: str = ""
    category: str
    location: str
    city: Optional[str] = None
    state: Optional[str] = None
    capacity: CapacityIn
    pricing: PricingIn
    operatingHours: OperatingHoursIn = OperatingHoursIn()
    amenities: List[str] = []
    images: List[str] = []
    rules: List[str] = []
    features: List[str] = []
    rating: float = Field(0, ge=0, le=5)
    reviewCount: int = Field(0, ge=0)
    status: str = "Available"

    @field_validator("name", "category", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("required")
        return v.strip()

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)


class CapacityPatch(BaseModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=1)


class PricingPatch(BaseModel):
    hourly: Optional[float] = Field(None, ge=0)
    halfDay: Optional[float] = Field(None, ge=0)
    fullDay: Optional[float] = Field(None, ge=0)


class OperatingHoursPatch(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def check_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_hhmm(v):
            raise ValueError("operating hours must be HH:MM")
        return v


class FacilityUpdate(BaseModel):
    """Partial update; nested objects may carry only some of their keys."""
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    capacity: Optional[CapacityPatch] = None
    pricing: Optional[PricingPatch] = None
    operatingHours: Optional[OperatingHoursPatch] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    features: Optional[List[str]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviewCount: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None

    @field_validator("name", "category", "location")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)


class FacilityFilter(BaseModel):
    category: Optional[str] = None
    minCapacity: Optional[int] = None
    maxPrice: Optional[float] = None
    status: Optional[str] = None
    amenities: List[str] = []
    search: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    sort: Optional[str] = None


class CapacityOut(BaseModel):
    min: int
    max: int


class PricingOut(BaseModel):
    hourly: float
    halfDay: float
    fullDay: float


class OperatingHoursOut(BaseModel):
    start: str
    end: str


class FacilityOut(BaseModel):
    id: str
    name: str
    description: str = ""
    category: str
    location: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    capacity: CapacityOut
    pricing: PricingOut
    operatingHours: OperatingHoursOut
    amenities: List[str] = []
    images: List[str] = []
    rules: List[str] = []
    features: List[str] = []
    rating: float = 0
    reviewCount: int = 0
    status: str


class SlotOut(BaseModel):
    time: str
    available: bool


class DayAvailabilityOut(BaseModel):
    facilityId: str
    date: str
    timeSlots: List[SlotOut]
