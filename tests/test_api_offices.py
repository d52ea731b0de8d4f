# tests/test_api_offices.py
from office_booking.models import UserRole


def test_admin_creates_office_with_owner(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    owner = make_user(role=UserRole.OFFICE_OWNER)

    r = client.post(
        "/api/offices",
        json={"number": "301", "companyName": "Acme", "ownerIds": [owner.id]},
        headers=auth_headers(admin),
    )

    assert r.status_code == 201
    data = r.json()["data"]
    assert data["number"] == "301"
    assert data["ownerIds"] == [owner.id]


def test_duplicate_office_number(client, make_user, make_office, auth_headers):
    make_office(number="301")
    admin = make_user(role=UserRole.ADMIN)
    r = client.post("/api/offices", json={"number": "301", "companyName": "Other"}, headers=auth_headers(admin))
    assert r.status_code == 409


def test_owner_must_have_owner_role(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    visitor = make_user()
    r = client.post(
        "/api/offices",
        json={"number": "302", "companyName": "Acme", "ownerIds": [visitor.id]},
        headers=auth_headers(admin),
    )
    assert r.status_code == 400


def test_public_listing_uses_reduced_projection(client, make_office):
    make_office(number="101", company_name="Acme")
    make_office(number="102", company_name="Globex")
    make_office(number="103", company_name="Hidden", is_active=False)

    r = client.get("/api/offices", params={"q": "acme"})
    body = r.json()

    assert body["pagination"]["total"] == 1
    assert set(body["data"][0]) == {"id", "number", "companyName"}


def test_owner_edits_company_name_only(client, make_user, make_office, auth_headers):
    owner = make_user(role=UserRole.OFFICE_OWNER)
    office = make_office(owners=[owner])
    headers = auth_headers(owner)

    r = client.patch(f"/api/offices/{office.id}", json={"companyName": "Acme Ltd"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["companyName"] == "Acme Ltd"

    r = client.patch(f"/api/offices/{office.id}", json={"isActive": False}, headers=headers)
    assert r.status_code == 403


def test_soft_delete_hides_office(client, make_user, make_office, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    office = make_office()

    assert client.delete(f"/api/offices/{office.id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/api/offices/{office.id}").status_code == 404

    r = client.get(f"/api/offices/{office.id}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["data"]["deletedAt"] is not None


def test_owner_assignment(client, make_user, make_office, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    owner = make_user(role=UserRole.OFFICE_OWNER)
    office = make_office()
    headers = auth_headers(admin)

    r = client.post(f"/api/offices/{office.id}/owners", json={"userId": owner.id}, headers=headers)
    assert r.json()["data"]["ownerIds"] == [owner.id]

    r = client.delete(f"/api/offices/{office.id}/owners/{owner.id}", headers=headers)
    assert r.json()["data"]["ownerIds"] == []
