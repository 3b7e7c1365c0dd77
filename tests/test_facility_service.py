import pytest

from reservations.core.errors import NotFoundError, ValidationError
from reservations.models.booking import Booking
from reservations.schemas.booking import BookingCreate
from reservations.schemas.facility import FacilityFilter, FacilityUpdate
from reservations.services import booking_service, facility_service


@pytest.fixture
def catalog(make_facility):
    return [
        make_facility(),
        make_facility(
            name="Meeting Room B", category="meeting-room", location="Building 2, Floor 2",
            description="Intimate space for small team meetings",
            city="Austin", state="Texas", capacity={"min": 4, "max": 8},
            pricing={"hourly": 30}, amenities=["Whiteboard", "TV Screen"], rating=4.3, status="Limited",
        ),
        make_facility(
            name="Training Hall", category="training-room", location="Building 3, Ground Floor",
            description="Large hall for workshops", city="Chicago", state="Illinois",
            capacity={"min": 20, "max": 50}, pricing={"hourly": 100},
            amenities=["Projector", "Sound System"], rating=4.7, status="Booked",
        ),
    ]


def _names(items):
    return [f.name for f in items]


def test_no_filters_returns_catalog_order(db, catalog):
    assert _names(facility_service.list_facilities(db)) == ["Conference Room A", "Meeting Room B", "Training Hall"]


def test_filters_are_anded(db, catalog):
    flt = FacilityFilter(category="meeting-room", minCapacity=10)
    assert _names(facility_service.list_facilities(db, flt)) == ["Conference Room A"]

    flt = FacilityFilter(maxPrice=50, status="Limited")
    assert _names(facility_service.list_facilities(db, flt)) == ["Meeting Room B"]


def test_all_is_a_wildcard(db, catalog):
    flt = FacilityFilter(category="all", status="all")
    assert len(facility_service.list_facilities(db, flt)) == 3


def test_search_is_case_insensitive_across_text_fields(db, catalog):
    assert _names(facility_service.list_facilities(db, FacilityFilter(search="CONFERENCE"))) == ["Conference Room A"]
    assert _names(facility_service.list_facilities(db, FacilityFilter(search="workshops"))) == ["Training Hall"]
    assert _names(facility_service.list_facilities(db, FacilityFilter(search="austin"))) == ["Meeting Room B"]
    assert facility_service.list_facilities(db, FacilityFilter(search="observatory")) == []


def test_amenities_must_all_be_present(db, catalog):
    flt = FacilityFilter(amenities=["Projector"])
    assert _names(facility_service.list_facilities(db, flt)) == ["Conference Room A", "Training Hall"]

    flt = FacilityFilter(amenities=["Projector", "Whiteboard"])
    assert _names(facility_service.list_facilities(db, flt)) == ["Conference Room A"]


def test_location_filters(db, catalog):
    assert _names(facility_service.list_facilities(db, FacilityFilter(city="chicago"))) == ["Training Hall"]
    assert _names(facility_service.list_facilities(db, FacilityFilter(state="California"))) == ["Conference Room A"]


@pytest.mark.parametrize(
    "sort, expected",
    [
        ("price_asc", ["Meeting Room B", "Conference Room A", "Training Hall"]),
        ("price_desc", ["Training Hall", "Conference Room A", "Meeting Room B"]),
        ("rating_desc", ["Training Hall", "Conference Room A", "Meeting Room B"]),
        ("capacity_desc", ["Training Hall", "Conference Room A", "Meeting Room B"]),
        ("name_desc", ["Training Hall", "Meeting Room B", "Conference Room A"]),
    ],
)
def test_sorting(db, catalog, sort, expected):
    assert _names(facility_service.list_facilities(db, FacilityFilter(sort=sort))) == expected


def test_unknown_sort(db, catalog):
    with pytest.raises(ValidationError) as exc:
        facility_service.list_facilities(db, FacilityFilter(sort="cheapest"))
    assert exc.value.reason == "InvalidSort"


def test_get_facility_is_repeatable(db, facility):
    first = facility_service.get_facility(db, facility.id)
    second = facility_service.get_facility(db, facility.id)
    assert (first.id, first.name, first.capacity_max) == (second.id, second.name, second.capacity_max)
    with pytest.raises(NotFoundError):
        facility_service.get_facility(db, "does-not-exist")


def test_categories_are_counted(db, catalog):
    assert facility_service.list_categories(db) == [
        {"category": "meeting-room", "count": 2},
        {"category": "training-room", "count": 1},
    ]


def test_update_only_touches_given_fields(db, facility):
    out = facility_service.update_facility(
        db, facility.id, FacilityUpdate(status="Limited", pricing={"hourly": 60}), actor="admin@example.com",
    )
    assert out.status == "Limited"
    assert out.price_hourly == 60
    assert out.price_half_day == 180
    assert out.price_full_day == 320
    assert out.name == "Conference Room A"
    assert out.capacity_max == 20


def test_price_change_does_not_reprice_existing_bookings(db, facility, customer):
    req = BookingCreate(facilityId=facility.id, date="2030-06-10", timeSlot="09:00", duration=2, attendees=5, purpose="Sync")
    b = booking_service.create_booking(db, req, customer)
    facility_service.update_facility(db, facility.id, FacilityUpdate(pricing={"hourly": 80}), actor="admin@example.com")
    db.refresh(b)
    assert b.total_amount == 100


def test_delete_keeps_bookings_with_their_snapshot(db, facility, customer):
    req = BookingCreate(facilityId=facility.id, date="2030-06-10", timeSlot="09:00", attendees=5, purpose="Sync")
    b = booking_service.create_booking(db, req, customer)

    out = facility_service.delete_facility(db, facility.id, actor="admin@example.com")
    assert out == {"id": facility.id, "orphanedBookings": 1}

    kept = db.query(Booking).filter(Booking.booking_ref == b.booking_ref).one()
    assert kept.facility_name == "Conference Room A"
    assert booking_service.list_facility_bookings(db, kept.facility_id) == [kept]


def test_listing_twice_returns_the_same_set(db, catalog):
    first = {f.id for f in facility_service.list_facilities(db)}
    second = {f.id for f in facility_service.list_facilities(db)}
    assert first == second == {f.id for f in catalog}


@pytest.mark.parametrize("term", ["_", "%", "0%"])
def test_search_wildcard_characters_are_literal(db, catalog, make_facility, term):
    promo = make_facility(name="Room 50% off", description="Promo space", city="Miami", state="Florida")
    expected = [promo.id] if "%" in term else []
    assert [f.id for f in facility_service.list_facilities(db, FacilityFilter(search=term))] == expected


def test_partial_nested_update_merges_with_current_values(db, facility):
    out = facility_service.update_facility(
        db, facility.id, FacilityUpdate(capacity={"max": 30}, operatingHours={"end": "22:00"}), actor="admin@example.com",
    )
    assert (out.capacity_min, out.capacity_max) == (10, 30)
    assert (out.open_time, out.close_time) == ("08:00", "22:00")


def test_partial_capacity_update_cannot_invert_range(db, facility):
    with pytest.raises(ValidationError) as exc:
        facility_service.update_facility(db, facility.id, FacilityUpdate(capacity={"max": 5}), actor="admin@example.com")
    assert exc.value.reason == "InvalidCapacity"

    with pytest.raises(ValidationError) as exc:
        facility_service.update_facility(db, facility.id, FacilityUpdate(operatingHours={"start": "21:00"}), actor="admin@example.com")
    assert exc.value.reason == "InvalidOperatingHours"

    kept = facility_service.get_facility(db, facility.id)
    assert (kept.capacity_min, kept.capacity_max, kept.open_time) == (10, 20, "08:00")
