from pydantic import BaseModel, field_validator
from typing import List, Optional


def _check_city(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("city name required")
    if "," in v:
        raise ValueError("city name must not contain commas")
    return v


def _check_state_name(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("state name required")
    return v


def _check_state_code(v: str) -> str:
    v = (v or "").strip().upper()
    if not 1 <= len(v) <= 2:
        raise ValueError("state code must be 1-2 characters")
    return v


class StateIn(BaseModel):
    name: str
    code: str
    cities: List[str] = []

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_state_name(v)

    @field_validator("code")
    @classmethod
    def check_code(cls, v: str) -> str:
        return _check_state_code(v)

    @field_validator("cities")
    @classmethod
    def check_cities(cls, v: List[str]) -> List[str]:
        return [_check_city(c) for c in v]


class StatePatch(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_state_name(v) if v is not None else v

    @field_validator("code")
    @classmethod
    def check_code(cls, v: Optional[str]) -> Optional[str]:
        return _check_state_code(v) if v is not None else v


class CityIn(BaseModel):
    cityName: str

    @field_validator("cityName")
    @classmethod
    def check_city(cls, v: str) -> str:
        return _check_city(v)


class CityRename(BaseModel):
    oldCityName: str
    newCityName: str

    @field_validator("newCityName")
    @classmethod
    def check_city(cls, v: str) -> str:
        return _check_city(v)


class StateOut(BaseModel):
    id: str
    name: str
    code: str
    cities: List[str] = []
