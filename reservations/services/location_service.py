"""State/City taxonomy.

Cities live inside their state; deleting a state drops its cities. Renames
and deletes do not cascade into facilities, which keep plain city/state
strings; callers get the number of facilities left pointing at the old name.
"""
import logging
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from reservations.core.errors import ConflictError, NotFoundError
from reservations.models.location import State
from reservations.schemas.location import StateIn, StatePatch
from reservations.services.audit_service import log_audit
from reservations.services.facility_service import count_facilities_referencing

logger = logging.getLogger(__name__)


def _warn_stale(kind: str, old: str, stale: int) -> None:
    if stale:
        logger.warning("%s %r changed; %d facility record(s) still reference it", kind, old, stale)


def _name_taken(db: Session, name: str, exclude_id: str | None = None) -> bool:
    q = db.query(State.id).filter(func.lower(State.name) == name.strip().lower())
    if exclude_id:
        q = q.filter(State.id != exclude_id)
    return q.first() is not None


def list_states(db: Session) -> list[State]:
    return db.query(State).order_by(State.name.asc()).all()


def get_state(db: Session, state_id: str) -> State:
    s = db.get(State, state_id)
    if not s:
        raise NotFoundError("state not found", stateId=state_id)
    return s


def create_state(db: Session, body: StateIn, actor: str) -> State:
    if _name_taken(db, body.name):
        raise ConflictError(f"state '{body.name}' already exists")
    cities: list[str] = []
    for c in body.cities:
        if c.lower() not in {x.lower() for x in cities}:
            cities.append(c)
    s = State(id=str(uuid.uuid4()), name=body.name.strip(), code=body.code.strip().upper())
    s.cities = cities
    db.add(s)
    log_audit(db, actor, "state.create", "state", s.id, {"name": s.name, "code": s.code})
    db.commit()
    db.refresh(s)
    return s


def update_state(db: Session, state_id: str, body: StatePatch, actor: str) -> tuple[State, int]:
    s = get_state(db, state_id)
    stale = 0
    if body.name is not None and body.name.strip() != s.name:
        if _name_taken(db, body.name, exclude_id=s.id):
            raise ConflictError(f"state '{body.name}' already exists")
        stale = count_facilities_referencing(db, state=s.name)
        _warn_stale("state", s.name, stale)
        s.name = body.name.strip()
    if body.code is not None:
        s.code = body.code.strip().upper()
    log_audit(db, actor, "state.update", "state", s.id, {"name": s.name, "code": s.code})
    db.commit()
    db.refresh(s)
    return s, stale


def delete_state(db: Session, state_id: str, actor: str) -> int:
    """Removes the state with all of its cities; returns the stale facility count."""
    s = get_state(db, state_id)
    stale = count_facilities_referencing(db, state=s.name)
    _warn_stale("state", s.name, stale)
    log_audit(db, actor, "state.delete", "state", s.id, {"name": s.name, "cities": s.cities})
    db.delete(s)
    db.commit()
    return stale


def list_cities(db: Session, state_id: str) -> list[str]:
    return get_state(db, state_id).cities


def add_city(db: Session, state_id: str, city: str, actor: str) -> State:
    s = get_state(db, state_id)
    if city.lower() in {c.lower() for c in s.cities}:
        raise ConflictError(f"city '{city}' already exists in {s.name}")
    s.cities = s.cities + [city]
    log_audit(db, actor, "city.create", "state", s.id, {"city": city})
    db.commit()
    db.refresh(s)
    return s


def rename_city(db: Session, state_id: str, old: str, new: str, actor: str) -> tuple[State, int]:
    s = get_state(db, state_id)
    cities = s.cities
    if old not in cities:
        raise NotFoundError(f"city '{old}' not found in {s.name}")
    if new != old and new.lower() in {c.lower() for c in cities if c != old}:
        raise ConflictError(f"city '{new}' already exists in {s.name}")
    # in-place replace keeps list order
    s.cities = [new if c == old else c for c in cities]
    stale = count_facilities_referencing(db, city=old) if new != old else 0
    _warn_stale("city", old, stale)
    log_audit(db, actor, "city.rename", "state", s.id, {"from": old, "to": new})
    db.commit()
    db.refresh(s)
    return s, stale


def delete_city(db: Session, state_id: str, city: str, actor: str) -> tuple[State, int]:
    s = get_state(db, state_id)
    if city not in s.cities:
        raise NotFoundError(f"city '{city}' not found in {s.name}")
    s.cities = [c for c in s.cities if c != city]
    stale = count_facilities_referencing(db, city=city)
    _warn_stale("city", city, stale)
    log_audit(db, actor, "city.delete", "state", s.id, {"city": city})
    db.commit()
    db.refresh(s)
    return s, stale
