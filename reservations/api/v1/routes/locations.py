from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from reservations.db.session import get_db
from reservations.api.deps import require_admin
from reservations.models.location import State
from reservations.models.user import User
from reservations.schemas.location import StateIn, StatePatch, StateOut, CityIn, CityRename
from reservations.services import location_service

router = APIRouter(tags=["locations"])


def state_out(s: State) -> StateOut:
    return StateOut(id=s.id, name=s.name, code=s.code, cities=s.cities)


@router.get("/locations/states")
def list_states(db: Session = Depends(get_db)):
    return {"success": True, "data": [state_out(s) for s in location_service.list_states(db)]}


@router.get("/locations/states/{state_id}")
def get_state(state_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": state_out(location_service.get_state(db, state_id))}


@router.post("/locations/states", status_code=201)
def create_state(body: StateIn, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s = location_service.create_state(db, body, actor=me.email)
    return {"success": True, "data": state_out(s)}


@router.put("/locations/states/{state_id}")
def update_state(state_id: str, body: StatePatch, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s, stale = location_service.update_state(db, state_id, body, actor=me.email)
    return {"success": True, "data": state_out(s), "staleFacilityRefs": stale}


@router.delete("/locations/states/{state_id}")
def delete_state(state_id: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    stale = location_service.delete_state(db, state_id, actor=me.email)
    return {"success": True, "staleFacilityRefs": stale}


@router.get("/locations/states/{state_id}/cities")
def list_cities(state_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": location_service.list_cities(db, state_id)}


@router.post("/locations/states/{state_id}/cities", status_code=201)
def add_city(state_id: str, body: CityIn, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s = location_service.add_city(db, state_id, body.cityName, actor=me.email)
    return {"success": True, "data": state_out(s)}


@router.put("/locations/states/{state_id}/cities")
def rename_city(state_id: str, body: CityRename, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s, stale = location_service.rename_city(db, state_id, body.oldCityName, body.newCityName, actor=me.email)
    return {"success": True, "data": state_out(s), "staleFacilityRefs": stale}


@router.delete("/locations/states/{state_id}/cities/{city_name}")
def delete_city(state_id: str, city_name: str, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    s, stale = location_service.delete_city(db, state_id, city_name, actor=me.email)
    return {"success": True, "data": state_out(s), "staleFacilityRefs": stale}
