"""
Shared fixtures: an in-memory SQLite database rebuilt for every test, an API
client bound to it, and a couple of users with bearer tokens.
"""
import os
import uuid

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

import reservations.models  # noqa: F401
from reservations.core.security import create_access_token, hash_password
from reservations.db.session import Base, SessionLocal, engine
from reservations.main import app
from reservations.models.user import User
from reservations.schemas.facility import FacilityCreate
from reservations.services import facility_service


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _user(db, email: str, role: str, name: str, phone: str = "555-0100") -> User:
    u = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=name,
        phone=phone,
        role=role,
        password_hash=hash_password("password123"),
        is_active=True,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def admin(db) -> User:
    return _user(db, "admin@example.com", "admin", "Ada Admin")


@pytest.fixture
def customer(db) -> User:
    return _user(db, "john@example.com", "customer", "John Doe")


@pytest.fixture
def other_customer(db) -> User:
    return _user(db, "jane@example.com", "customer", "Jane Roe", phone="555-0199")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers(admin)


@pytest.fixture
def customer_headers(customer) -> dict:
    return auth_headers(customer)


@pytest.fixture
def make_facility(db):
    """Factory for catalog entries; defaults mirror Conference Room A."""

    def _make(**overrides):
        payload = {
            "name": "Conference Room A",
            "description": "Spacious conference room with modern AV equipment",
            "category": "meeting-room",
            "location": "Building 1, Floor 3",
            "city": "San Francisco",
            "state": "California",
            "capacity": {"min": 10, "max": 20},
            "pricing": {"hourly": 50, "halfDay": 180, "fullDay": 320},
            "operatingHours": {"start": "08:00", "end": "20:00"},
            "amenities": ["Projector", "Whiteboard", "Video Conferencing"],
            "rating": 4.5,
            "reviewCount": 48,
            "status": "Available",
        }
        payload.update(overrides)
        return facility_service.create_facility(db, FacilityCreate(**payload), actor="admin@example.com")

    return _make


@pytest.fixture
def facility(make_facility):
    return make_facility()
