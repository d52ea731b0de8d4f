# tests/test_api_bookings.py
import pytest

from office_booking.models import BookingStatus, UserRole

from .conftest import at


@pytest.fixture
def owner(make_user):
    return make_user(role=UserRole.OFFICE_OWNER)


@pytest.fixture
def office(make_office, make_window, owner):
    office = make_office(owners=[owner])
    make_window(office, at(9), at(17))
    return office


def payload(office, start="2030-01-07T10:00:00Z", end="2030-01-07T11:00:00Z", **extra):
    body = {
        "officeId": office.id,
        "startAt": start,
        "endAt": end,
        "visitorName": "Ana",
        "visitorEmail": "ana@example.com",
    }
    body.update(extra)
    return body


def test_anonymous_booking_flow(client, office, owner, auth_headers):
    r = client.post("/api/bookings", json=payload(office, title="Interview"))
    assert r.status_code == 201
    booking = r.json()["data"]
    assert booking["status"] == "REQUESTED"
    assert booking["office"]["number"] == office.number

    booking_id = booking["id"]

    # invisible without the visitor email
    assert client.get(f"/api/bookings/{booking_id}").status_code == 404
    r = client.get(f"/api/bookings/{booking_id}", params={"visitorEmail": "ana@example.com"})
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Interview"

    r = client.post(f"/api/bookings/{booking_id}/confirm", headers=auth_headers(owner))
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "CONFIRMED"

    r = client.post(f"/api/bookings/{booking_id}/cancel", json={"visitorEmail": "ana@example.com"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "CANCELLED"


def test_booking_outside_availability(client, office):
    r = client.post("/api/bookings", json=payload(office, "2030-01-07T18:00:00Z", "2030-01-07T19:00:00Z"))
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_overlapping_booking_conflicts(client, office):
    assert client.post("/api/bookings", json=payload(office)).status_code == 201
    r = client.post("/api/bookings", json=payload(office, "2030-01-07T10:30:00Z", "2030-01-07T11:30:00Z"))
    assert r.status_code == 409


def test_visitor_data_is_required(client, office):
    body = payload(office)
    del body["visitorEmail"]
    assert client.post("/api/bookings", json=body).status_code == 422

    body = payload(office, end="2030-01-07T09:00:00Z")
    assert client.post("/api/bookings", json=body).status_code == 422


def test_anonymous_confirm_is_forbidden(client, make_booking, office):
    booking = make_booking(office, visitor_email="guest@example.com")
    r = client.post(f"/api/bookings/{booking.id}/confirm")
    # without proof of the visitor email the booking is not even visible
    assert r.status_code == 404

    r = client.post(f"/api/bookings/{booking.id}/confirm", json={"visitorEmail": "guest@example.com"})
    assert r.status_code == 403

    r = client.put(
        f"/api/bookings/{booking.id}",
        params={"visitorEmail": "guest@example.com"},
        json={"status": "CONFIRMED"},
    )
    assert r.status_code == 403


def test_public_list_hides_contact_details(client, office, make_booking, make_user, auth_headers):
    make_booking(office, visitor_email="guest@example.com")

    public = client.get("/api/bookings").json()["data"][0]
    assert "visitorEmail" not in public and "notes" not in public
    assert public["visitorName"] == "Guest"

    attendant = make_user(role=UserRole.ATTENDANT)
    full = client.get("/api/bookings", headers=auth_headers(attendant)).json()["data"][0]
    assert full["visitorEmail"] == "guest@example.com"


def test_list_filter_validation(client):
    assert client.get("/api/bookings", params={"limit": 101}).status_code == 422
    assert client.get("/api/bookings", params={"page": 0}).status_code == 422
    assert client.get("/api/bookings", params={"status": "LOST"}).status_code == 422


def test_my_bookings(client, office, make_booking, make_user, auth_headers):
    make_booking(office, at(9), at(10), visitor_email="ana@example.com")
    make_booking(office, at(10), at(11), visitor_email="bruno@example.com")

    r = client.get("/api/bookings/my", params={"visitorEmail": "ana@example.com"})
    assert r.json()["pagination"]["total"] == 1

    user = make_user(email="bruno@example.com")
    r = client.get("/api/bookings/my", headers=auth_headers(user))
    assert [b["visitorEmail"] for b in r.json()["data"]] == ["bruno@example.com"]

    assert client.get("/api/bookings/my").status_code == 400


def test_complete_requires_staff(client, office, owner, make_booking, make_user, auth_headers):
    booking = make_booking(office, status=BookingStatus.CONFIRMED)

    assert client.post(f"/api/bookings/{booking.id}/complete", headers=auth_headers(owner)).status_code == 403

    attendant = make_user(role=UserRole.ATTENDANT)
    r = client.post(f"/api/bookings/{booking.id}/complete", headers=auth_headers(attendant))
    assert r.json()["data"]["status"] == "COMPLETED"

    r = client.post(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(attendant))
    assert r.status_code == 400


def test_owner_edits_notes(client, office, owner, make_booking, auth_headers):
    booking = make_booking(office)
    r = client.put(f"/api/bookings/{booking.id}", json={"notes": "Needs projector"}, headers=auth_headers(owner))
    assert r.status_code == 200
    assert r.json()["data"]["notes"] == "Needs projector"


def test_delete_and_patch_not_allowed(client, office, make_booking):
    booking = make_booking(office)
    assert client.delete(f"/api/bookings/{booking.id}").status_code == 405
    assert client.patch(f"/api/bookings/{booking.id}", json={}).status_code == 405


def test_edit_rejects_null_needs_support(client, office, make_booking, make_user, auth_headers):
    booking = make_booking(office)
    admin = auth_headers(make_user(role=UserRole.ADMIN))

    r = client.put(f"/api/bookings/{booking.id}", json={"needsSupport": None}, headers=admin)
    assert r.status_code == 422

    r = client.put(f"/api/bookings/{booking.id}", json={"needsSupport": True}, headers=admin)
    assert r.status_code == 200
    assert r.json()["data"]["needsSupport"] is True


def test_edit_cannot_drop_visitor_contact(client, office, make_booking, make_user, auth_headers):
    booking = make_booking(office)
    admin = auth_headers(make_user(role=UserRole.ADMIN))

    r = client.put(
        f"/api/bookings/{booking.id}",
        json={"visitorName": None, "visitorEmail": None},
        headers=admin,
    )
    assert r.status_code == 400
    assert r.json()["success"] is False
