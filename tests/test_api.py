"""End-to-end checks through the HTTP surface: envelopes, auth and the booking flow."""
from tests.conftest import auth_headers

API = "/api/v1"


def _book(client, headers, facility_id, **overrides):
    payload = {
        "facilityId": facility_id,
        "date": "2099-02-10",
        "timeSlot": "09:00",
        "duration": 3,
        "attendees": 15,
        "purpose": "Team Meeting",
    }
    payload.update(overrides)
    return client.post(f"{API}/bookings", json=payload, headers=headers)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_signup_login_me(client):
    r = client.post(f"{API}/auth/signup", json={
        "email": "Sam@Example.com", "password": "s3cret-pass", "name": "Sam", "phone": "555-0111",
    })
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = client.post(f"{API}/auth/login", json={"email": "sam@example.com", "password": "s3cret-pass"})
    tokens = r.json()["data"]
    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}).json()["data"]
    assert me["email"] == "sam@example.com"
    assert me["role"] == "customer"

    r = client.post(f"{API}/auth/refresh", params={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    # a refresh token is not an access token
    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401


def test_duplicate_signup_and_bad_login(client, customer):
    r = client.post(f"{API}/auth/signup", json={"email": customer.email, "password": "password123"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "ConflictError"

    r = client.post(f"{API}/auth/login", json={"email": customer.email, "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": {"code": "Unauthenticated", "message": "Invalid credentials"}}


def test_facility_listing_is_public(client, facility):
    r = client.get(f"{API}/facilities", params={"search": "conference", "amenities": ["Projector", "Whiteboard"]})
    body = r.json()
    assert body["success"] is True
    assert [f["id"] for f in body["data"]] == [facility.id]
    f = body["data"][0]
    assert f["capacity"] == {"min": 10, "max": 20}
    assert f["pricing"]["hourly"] == 50
    assert f["operatingHours"] == {"start": "08:00", "end": "20:00"}

    r = client.get(f"{API}/facilities", params={"sort": "cheapest"})
    assert r.status_code == 400
    assert r.json()["error"]["details"]["reason"] == "InvalidSort"


def test_unknown_facility_envelope(client):
    r = client.get(f"{API}/facilities/nope")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NotFound"


def test_facility_admin_routes_require_admin(client, customer_headers, admin_headers):
    payload = {
        "name": "Innovation Lab", "category": "training-room", "location": "Building 2, Floor 4",
        "capacity": {"min": 10, "max": 25}, "pricing": {"hourly": 60},
    }
    assert client.post(f"{API}/facilities", json=payload).status_code == 401
    r = client.post(f"{API}/facilities", json=payload, headers=customer_headers)
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "Unauthorized"

    r = client.post(f"{API}/facilities", json=payload, headers=admin_headers)
    assert r.status_code == 201
    fid = r.json()["data"]["id"]
    r = client.put(f"{API}/facilities/{fid}", json={"status": "Booked"}, headers=admin_headers)
    assert r.json()["data"]["status"] == "Booked"
    r = client.delete(f"{API}/facilities/{fid}", headers=admin_headers)
    assert r.json()["data"] == {"id": fid, "orphanedBookings": 0}


def test_invalid_facility_payload(client, admin_headers):
    payload = {
        "name": "Broken", "category": "meeting-room", "location": "x",
        "capacity": {"min": 30, "max": 20}, "pricing": {"hourly": 10},
    }
    r = client.post(f"{API}/facilities", json=payload, headers=admin_headers)
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "ValidationError"


def test_booking_flow(client, facility, customer_headers):
    r = _book(client, customer_headers, facility.id)
    assert r.status_code == 201
    booking = r.json()["data"]
    assert booking["totalAmount"] == 150
    assert booking["endTime"] == "12:00"
    assert booking["status"] == "confirmed"
    assert booking["canCancel"] is True
    ref = booking["bookingRef"]

    r = client.get(f"{API}/bookings/availability", params={
        "facilityId": facility.id, "date": "2099-02-10", "timeSlot": "10:00",
    })
    assert r.json()["data"]["available"] is False

    r = client.get(f"{API}/facilities/{facility.id}/availability", params={"date": "2099-02-10"})
    slots = {s["time"]: s["available"] for s in r.json()["data"]["timeSlots"]}
    assert len(slots) == 12
    assert [t for t, free in slots.items() if not free] == ["09:00", "10:00", "11:00"]

    summary = client.get(f"{API}/bookings/summary", headers=customer_headers).json()["data"]
    assert summary["total"] == 1
    assert summary["counts"] == {"upcoming": 1, "past": 0, "cancelled": 0}
    assert [b["bookingRef"] for b in summary["upcoming"]] == [ref]

    r = client.post(f"{API}/bookings/{ref}/cancel", json={"reason": "plans changed"}, headers=customer_headers)
    assert r.json()["data"]["status"] == "cancelled"
    r = client.post(f"{API}/bookings/{ref}/cancel", headers=customer_headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "AlreadyCancelled"

    cancelled = client.get(f"{API}/bookings", params={"view": "cancelled"}, headers=customer_headers).json()["data"]
    assert [b["bookingRef"] for b in cancelled] == [ref]


def test_double_booking_is_a_conflict(client, facility, customer_headers, other_customer):
    first = _book(client, customer_headers, facility.id).json()["data"]
    r = _book(client, auth_headers(other_customer), facility.id, timeSlot="10:00", duration=1)
    assert r.status_code == 409
    error = r.json()["error"]
    assert error["code"] == "ConflictError"
    assert error["details"]["conflictsWith"] == [first["bookingRef"]]


def test_capacity_error_envelope(client, facility, customer_headers):
    r = _book(client, customer_headers, facility.id, attendees=25)
    assert r.status_code == 400
    assert r.json()["error"]["details"]["reason"] == "CapacityExceeded"


def test_malformed_booking_request(client, facility, customer_headers):
    r = _book(client, customer_headers, facility.id, date="10/02/2099")
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "ValidationError"
    assert _book(client, {}, facility.id).status_code == 401


def test_other_customers_cannot_read_or_cancel(client, facility, customer_headers, other_customer):
    ref = _book(client, customer_headers, facility.id).json()["data"]["bookingRef"]
    other = auth_headers(other_customer)

    assert client.get(f"{API}/bookings/{ref}", headers=other).status_code == 403
    assert client.post(f"{API}/bookings/{ref}/cancel", headers=other).status_code == 403
    assert client.get(f"{API}/bookings", headers=other).json()["data"] == []


def test_patch_booking(client, facility, customer_headers):
    ref = _book(client, customer_headers, facility.id).json()["data"]["bookingRef"]
    r = client.patch(f"{API}/bookings/{ref}", json={"timeSlot": "14:00", "attendees": 12}, headers=customer_headers)
    data = r.json()["data"]
    assert (data["timeSlot"], data["endTime"], data["attendees"]) == ("14:00", "17:00", 12)
    assert data["totalAmount"] == 150


def test_admin_booking_routes(client, facility, customer_headers, admin_headers):
    ref = _book(client, customer_headers, facility.id).json()["data"]["bookingRef"]

    assert client.get(f"{API}/admin/bookings", headers=customer_headers).status_code == 403
    rows = client.get(f"{API}/admin/bookings", params={"q": "john"}, headers=admin_headers).json()["data"]
    assert [b["bookingRef"] for b in rows] == [ref]

    r = client.post(f"{API}/admin/bookings/{ref}/complete", headers=admin_headers)
    assert r.json()["data"]["status"] == "completed"
    r = client.post(f"{API}/admin/bookings/{ref}/cancel", headers=admin_headers)
    assert r.status_code == 409

    metrics = client.get(f"{API}/admin/metrics/overview", headers=admin_headers).json()["data"]
    assert metrics["completed"] == 1
    assert metrics["revenue"] == 150

    users = client.get(f"{API}/admin/users", params={"role": "customer"}, headers=admin_headers).json()["data"]
    assert users["total"] == 1


def test_location_routes(client, admin_headers, customer_headers):
    r = client.post(f"{API}/locations/states", json={"name": "Texas", "code": "tx", "cities": ["Austin"]}, headers=admin_headers)
    assert r.status_code == 201
    sid = r.json()["data"]["id"]

    r = client.post(f"{API}/locations/states/{sid}/cities", json={"cityName": "Dallas"}, headers=admin_headers)
    assert r.json()["data"]["cities"] == ["Austin", "Dallas"]
    r = client.put(f"{API}/locations/states/{sid}/cities", json={"oldCityName": "Dallas", "newCityName": "Houston"},
                   headers=admin_headers)
    assert r.json()["staleFacilityRefs"] == 0
    assert client.get(f"{API}/locations/states/{sid}/cities").json()["data"] == ["Austin", "Houston"]

    r = client.post(f"{API}/locations/states/{sid}/cities", json={"cityName": "El Paso"}, headers=customer_headers)
    assert r.status_code == 403
    r = client.delete(f"{API}/locations/states/{sid}", headers=admin_headers)
    assert r.json() == {"success": True, "staleFacilityRefs": 0}
    assert client.get(f"{API}/locations/states").json()["data"] == []


def test_partial_facility_update_over_http(client, facility, admin_headers):
    r = client.put(f"{API}/facilities/{facility.id}", json={"pricing": {"hourly": 60}}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["pricing"] == {"hourly": 60, "halfDay": 180, "fullDay": 320}

    r = client.put(f"{API}/facilities/{facility.id}", json={"capacity": {"max": 5}}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["details"]["reason"] == "InvalidCapacity"


def test_admin_user_search_is_literal(client, admin_headers, customer):
    r = client.get(f"{API}/admin/users", params={"q": "%"}, headers=admin_headers)
    assert r.json()["data"]["total"] == 0
    r = client.get(f"{API}/admin/users", params={"q": "john@"}, headers=admin_headers)
    assert [u["email"] for u in r.json()["data"]["items"]] == [customer.email]
