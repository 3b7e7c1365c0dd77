import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from reservations.db.session import SessionLocal
from reservations.core.security import hash_password
from reservations.models.user import User
from reservations.models.facility import Facility
from reservations.models.location import State

ADMIN_EMAIL = "admin@facilities.local"
ADMIN_PASSWORD = "admin12345"

FACILITIES = [
    {
        "name": "Conference Room A", "category": "meeting-room",
        "description": "Spacious conference room with modern AV equipment, perfect for presentations and large meetings.",
        "location": "Building 1, Floor 3", "city": "San Francisco", "state": "California",
        "capacity": (10, 20), "pricing": (50, 180, 320), "hours": ("08:00", "20:00"),
        "amenities": ["Projector", "Whiteboard", "Video Conferencing", "High-speed internet", "Air conditioning", "Parking"],
        "rules": ["No smoking", "Clean up after use", "Max capacity must not be exceeded"],
        "features": ["4K projector", "Wireless presentation", "Soundproof walls"],
        "rating": 4.5, "review_count": 48, "status": "Available",
    },
    {
        "name": "Meeting Room B", "category": "meeting-room",
        "description": "Intimate meeting space for small team meetings and brainstorming sessions.",
        "location": "Building 2, Floor 2", "city": "Austin", "state": "Texas",
        "capacity": (4, 8), "pricing": (30, 110, 200), "hours": ("08:00", "20:00"),
        "amenities": ["Whiteboard", "TV Screen", "High-speed internet", "Air conditioning"],
        "rules": ["No smoking", "Clean up after use"],
        "features": ["Writable walls", "Natural lighting"],
        "rating": 4.3, "review_count": 32, "status": "Limited",
    },
    {
        "name": "Training Hall", "category": "training-room",
        "description": "Large hall for workshops, training sessions and seminars with flexible seating.",
        "location": "Building 3, Ground Floor", "city": "Chicago", "state": "Illinois",
        "capacity": (20, 50), "pricing": (100, 380, 680), "hours": ("08:00", "20:00"),
        "amenities": ["Projector", "Sound System", "Microphones", "High-speed internet", "Air conditioning", "Parking"],
        "rules": ["No smoking", "Report damages immediately"],
        "features": ["Stage area", "Modular furniture"],
        "rating": 4.7, "review_count": 64, "status": "Booked",
    },
    {
        "name": "Executive Boardroom", "category": "meeting-room",
        "description": "Premium boardroom for executive meetings and client presentations.",
        "location": "Building 1, Floor 5", "city": "New York City", "state": "New York",
        "capacity": (6, 12), "pricing": (80, 300, 550), "hours": ("08:00", "20:00"),
        "amenities": ["Video Conferencing", "TV Screen", "Nespresso", "High-speed internet", "Air conditioning"],
        "rules": ["No smoking", "Business attire recommended"],
        "features": ["Leather chairs", "City view"],
        "rating": 4.8, "review_count": 35, "status": "Available",
    },
    {
        "name": "Innovation Lab", "category": "training-room",
        "description": "Creative space for hackathons, design sprints and hands-on workshops.",
        "location": "Building 2, Floor 4", "city": "Miami", "state": "Florida",
        "capacity": (10, 25), "pricing": (60, 220, 400), "hours": ("08:00", "22:00"),
        "amenities": ["Whiteboard", "Projector", "3D Printer", "High-speed internet"],
        "rules": ["Clean up after use", "Equipment training required"],
        "features": ["Maker tools", "Standing desks"],
        "rating": 4.6, "review_count": 41, "status": "Available",
    },
]

STATES = [
    ("California", "CA", ["Los Angeles", "San Francisco", "San Diego", "San Jose", "Sacramento"]),
    ("New York", "NY", ["New York City", "Buffalo", "Rochester", "Albany", "Syracuse"]),
    ("Texas", "TX", ["Houston", "Dallas", "Austin", "San Antonio", "Fort Worth"]),
    ("Florida", "FL", ["Miami", "Orlando", "Tampa", "Jacksonville", "Fort Lauderdale"]),
    ("Illinois", "IL", ["Chicago", "Springfield", "Naperville", "Aurora", "Rockford"]),
]


def ensure_user(db: Session, email: str, password: str, role: str, name: str):
    u = db.query(User).filter(User.email == email).first()
    if u:
        return
    db.add(
        User(
            id=str(uuid.uuid4()),
            email=email,
            full_name=name,
            role=role,
            password_hash=hash_password(password),
            is_active=True,
        )
    )
    db.commit()


def seed_facilities(db: Session) -> int:
    created = 0
    for item in FACILITIES:
        if db.query(Facility).filter(Facility.name == item["name"]).first():
            continue
        cap_min, cap_max = item["capacity"]
        hourly, half_day, full_day = item["pricing"]
        open_time, close_time = item["hours"]
        db.add(Facility(
            id=str(uuid.uuid4()),
            name=item["name"],
            category=item["category"],
            description=item["description"],
            location=item["location"],
            city=item["city"],
            state=item["state"],
            capacity_min=cap_min,
            capacity_max=cap_max,
            price_hourly=hourly,
            price_half_day=half_day,
            price_full_day=full_day,
            open_time=open_time,
            close_time=close_time,
            amenities=item["amenities"],
            rules=item["rules"],
            features=item["features"],
            rating=item["rating"],
            review_count=item["review_count"],
            status=item["status"],
        ))
        created += 1
    if created:
        db.commit()
    return created


def seed_states(db: Session) -> int:
    created = 0
    for name, code, cities in STATES:
        if db.query(State).filter(State.name == name).first():
            continue
        s = State(id=str(uuid.uuid4()), name=name, code=code)
        s.cities = cities
        db.add(s)
        created += 1
    if created:
        db.commit()
    return created


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            print("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_user(db, ADMIN_EMAIL, ADMIN_PASSWORD, "admin", "Admin")
        n_fac = seed_facilities(db)
        n_states = seed_states(db)
        print(f"[seed] facilities created={n_fac} states created={n_states}")
    finally:
        db.close()


if __name__ == "__main__":
    run()
