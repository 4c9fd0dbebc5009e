import json
from datetime import date, timedelta

import pytest

from models import AuditLog

PASSWORD = "correct-horse-battery"


def _register(client, email, password=PASSWORD, **extra):
    return client.post("/auth/register", json={"email": email, "password": password, **extra})


def _auth_headers(client, email):
    _register(client, email)
    resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def booking_day():
    return (date.today() + timedelta(days=7)).isoformat()


@pytest.fixture
def rina(client):
    return _auth_headers(client, "rina@example.com")


@pytest.fixture
def dodi(client):
    return _auth_headers(client, "dodi@example.com")


@pytest.fixture
def payload(catalog, booking_day):
    return {
        "capster_id": catalog.andi.id,
        "branch_id": catalog.downtown.id,
        "service_ids": [catalog.haircut.id, catalog.beard.id],
        "date": booking_day,
        "time": "2:00 PM",
    }


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": "ok"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_unknown_route_uses_the_error_envelope(client):
    resp = client.get("/nope")

    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": {"message": "Route not found", "statusCode": 404}}


# ── auth ─────────────────────────────────────────────────────────────────────

def test_register_login_me_logout(client):
    resp = _register(client, "Rina@Example.com", full_name="Rina")
    assert resp.status_code == 201

    login = client.post("/auth/login", json={"email": "rina@example.com", "password": PASSWORD})
    body = login.get_json()
    assert login.status_code == 200
    assert body["token_type"] == "Bearer"
    assert body["user"]["full_name"] == "Rina"

    headers = {"Authorization": f"Bearer {body['token']}"}
    me = client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.get_json()["email"] == "rina@example.com"

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401

    actions = [a.action for a in AuditLog.query.order_by(AuditLog.id).all()]
    assert actions == ["REGISTER_SUCCESS", "LOGIN_SUCCESS", "LOGOUT"]


def test_register_rejects_duplicates_and_short_passwords(client):
    assert _register(client, "rina@example.com").status_code == 201
    assert _register(client, "rina@example.com").status_code == 409
    assert _register(client, "dodi@example.com", password="short").status_code == 400
    assert _register(client, "not-an-email").status_code == 400


def test_wrong_password_is_unauthorized(client):
    _register(client, "rina@example.com")

    resp = client.post("/auth/login", json={"email": "rina@example.com", "password": "wrong-password"})

    assert resp.status_code == 401
    assert AuditLog.query.filter_by(action="LOGIN_FAIL").count() == 1


def test_booking_routes_require_a_token(client):
    resp = client.get("/booking")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False
    assert resp.get_json()["error"]["statusCode"] == 401


# ── booking ──────────────────────────────────────────────────────────────────

def test_create_booking_uses_the_token_identity(client, rina, payload):
    forged = "11111111-1111-4111-8111-111111111111"

    resp = client.post("/booking", json={**payload, "user_id": forged}, headers=rina)

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["data"]["user_id"] != forged
    assert body["data"]["user_id"] == client.get("/auth/me", headers=rina).get_json()["id"]
    assert body["data"]["booking_type"] == "multi"
    assert len(body["data"]["summary"]["slots"]) == 2

    audit = AuditLog.query.filter_by(action="BOOKING_CREATE").one()
    assert audit.entity == "booking"
    assert audit.entity_id == str(body["data"]["id"])


def test_double_booking_over_http_is_a_conflict(client, rina, dodi, payload):
    assert client.post("/booking", json=payload, headers=rina).status_code == 201

    resp = client.post("/booking", json={**payload, "time": "3:00 PM"}, headers=dodi)

    assert resp.status_code == 409
    assert resp.get_json()["error"]["statusCode"] == 409
    failed = AuditLog.query.filter_by(action="BOOKING_CREATE_FAIL").one()
    assert json.loads(failed.metadata_json)["kind"] == "conflict"


def test_invalid_body_is_a_bad_request(client, rina):
    resp = client.post("/booking", json={"capster_id": "x"}, headers=rina)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"] == {"field": "capster_id"}


def test_list_get_update_and_cancel(client, rina, dodi, payload):
    booking_id = client.post("/booking", json=payload, headers=rina).get_json()["data"]["id"]

    listed = client.get("/booking", headers=rina).get_json()["data"]
    assert [b["slot_sequence"] for b in listed] == [1, 2]
    assert client.get("/booking?status=cancelled", headers=rina).get_json()["data"] == []
    assert client.get("/booking?status=unknown", headers=rina).status_code == 400

    assert client.get(f"/booking/{booking_id}", headers=rina).status_code == 200
    assert client.get(f"/booking/{booking_id}", headers=dodi).status_code == 404

    moved = client.put(f"/booking/{booking_id}", json={"time": "4:00 PM"}, headers=rina)
    assert moved.status_code == 200
    assert moved.get_json()["data"]["summary"]["start_time"] == "4:00 PM"
    assert client.put(f"/booking/{booking_id}", json={"status": "x"}, headers=rina).status_code == 400

    cancelled = client.delete(f"/booking/{booking_id}", headers=rina)
    assert cancelled.status_code == 200
    assert cancelled.get_json()["data"]["cancelled_slots"] == 2
    assert client.delete(f"/booking/{booking_id}", headers=rina).status_code == 400

    actions = {a.action for a in AuditLog.query.filter_by(entity="booking").all()}
    assert actions == {
        "BOOKING_CREATE", "BOOKING_UPDATE", "BOOKING_UPDATE_FAIL",
        "BOOKING_CANCEL", "BOOKING_CANCEL_FAIL",
    }


# ── catalog ──────────────────────────────────────────────────────────────────

def test_catalog_routes(client, catalog):
    branches = client.get("/booking/branches")
    assert branches.status_code == 200
    assert [b["branch_name"] for b in branches.get_json()["data"]] == ["Downtown", "Uptown"]

    details = client.get(f"/booking/branches/{catalog.downtown.id}").get_json()["data"]
    assert [c["name"] for c in details["capsters"]] == ["Andi", "Budi"]

    services = client.get(f"/booking/branches/{catalog.uptown.id}/services").get_json()["data"]
    assert [s["name"] for s in services] == ["Hair Wash", "Hot Towel Shave"]

    capsters = client.get(f"/booking/branches/{catalog.uptown.id}/capsters").get_json()["data"]
    assert [c["name"] for c in capsters] == ["Citra"]

    assert client.get("/booking/branches/999").status_code == 404
    assert client.get("/booking/branches/abc/services").status_code == 400


def test_available_schedules_route(client, rina, payload, catalog, booking_day):
    client.post("/booking", json=payload, headers=rina)

    resp = client.get(
        "/booking/available-schedules",
        query_string={"capster_id": catalog.andi.id, "branch_id": catalog.downtown.id, "date": booking_day},
    )

    times = [s["time"] for s in resp.get_json()["data"]["available_slots"]]
    assert resp.status_code == 200
    assert len(times) == 8
    assert "14:00" not in times and "15:00" not in times

    missing = client.get("/booking/available-schedules", query_string={"capster_id": catalog.andi.id})
    assert missing.status_code == 400
