from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.gym_backend.gym_backend.main import create_app

from tests.fakes import RecordingMailSender, make_container, member_fields, package_fields


@pytest.fixture
def outbox():
    return RecordingMailSender()


@pytest.fixture
def container(outbox):
    return make_container(outbox)


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    app.testing = True
    return app.test_client()


def _login(client, container, *, role="admin", email="admin@gym.local"):
    container.users_repo.create(
        {
            "full_name": role.title(),
            "email": email,
            "password_hash": generate_password_hash("secret1"),
            "role": role,
            "is_email_verified": True,
        }
    )
    res = client.post("/api/auth/login", json={"email": email, "password": "secret1"})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.get_json()['access_token']}"}


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "ok"


def test_protected_route_needs_token(client):
    res = client.get("/api/members")
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_garbage_token_is_unauthorized(client):
    res = client.get("/api/members", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401


def test_role_not_allowed_is_forbidden(client, container):
    headers = _login(client, container, role="trainer", email="coach@gym.local")
    res = client.post("/api/members", json=member_fields(), headers=headers)
    assert res.status_code == 403


def test_register_verify_login_flow(client, outbox):
    res = client.post(
        "/api/auth/register",
        json={"full_name": "Desk", "email": "desk@gym.local", "password": "secret1"},
    )
    assert res.status_code == 201
    assert res.get_json()["data"]["role"] == "reception"

    res = client.post("/api/auth/login", json={"email": "desk@gym.local", "password": "secret1"})
    assert res.status_code == 403
    assert res.get_json()["code"] == "EMAIL_NOT_VERIFIED"

    html = outbox.sent[0]["html"]
    code = html.split("<b>")[1].split("</b>")[0]
    res = client.post("/api/auth/verify-email", json={"email": "desk@gym.local", "code": code})
    assert res.status_code == 200

    res = client.post("/api/auth/login", json={"email": "desk@gym.local", "password": "secret1"})
    assert res.status_code == 200
    assert res.get_json()["refresh_token"]


def test_anonymous_register_cannot_pick_a_role(client):
    res = client.post(
        "/api/auth/register",
        json={"full_name": "Eve", "email": "eve@gym.local", "password": "secret1", "role": "admin"},
    )
    assert res.status_code == 201
    assert res.get_json()["data"]["role"] == "reception"


def test_admin_can_register_staff_with_a_role(client, container):
    headers = _login(client, container)
    res = client.post(
        "/api/auth/register",
        json={"full_name": "Coach", "email": "coach@gym.local", "password": "secret1", "role": "trainer"},
        headers=headers,
    )
    assert res.status_code == 201
    assert res.get_json()["data"]["role"] == "trainer"


def test_forgot_password_is_generic(client):
    res = client.post("/api/auth/forgot-password", json={"email": "nobody@gym.local"})
    assert res.status_code == 200
    assert "email_sent" not in res.get_json()


def test_refresh_with_bad_token(client):
    res = client.post("/api/auth/refresh", json={"refresh_token": "bad"})
    assert res.status_code == 401


def test_membership_flow_over_http(client, container):
    headers = _login(client, container)

    res = client.post("/api/members", json=member_fields(), headers=headers)
    assert res.status_code == 201
    member = res.get_json()["data"]

    res = client.post("/api/packages", json=package_fields(), headers=headers)
    assert res.status_code == 201
    package = res.get_json()["data"]

    res = client.post(
        "/api/registrations",
        json={"member_id": member["member_id"], "package_id": package["package_id"]},
        headers=headers,
    )
    assert res.status_code == 201
    assert res.get_json()["data"]["registration"]["remaining_sessions"] == 10

    res = client.post(
        "/api/registrations",
        json={"member_id": member["member_id"], "package_id": package["package_id"]},
        headers=headers,
    )
    assert res.status_code == 409
    assert "active_package" in res.get_json()

    res = client.post("/api/attendance/checkin", json={"member_id": member["member_id"]}, headers=headers)
    assert res.status_code == 201
    assert res.get_json()["data"]["remaining_sessions"] == 9

    res = client.post("/api/attendance/checkin", json={"member_id": member["member_id"]}, headers=headers)
    assert res.status_code == 409

    res = client.post("/api/attendance/checkout", json={"member_id": member["member_id"]}, headers=headers)
    assert res.status_code == 200
    assert res.get_json()["data"]["attendance"]["status"] == "completed"

    res = client.get("/api/attendance/export.csv", headers=headers)
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert member["membership_number"] in res.get_data().decode("utf-8-sig")


def test_member_qr_is_png(client, container):
    headers = _login(client, container)
    member = client.post("/api/members", json=member_fields(), headers=headers).get_json()["data"]

    res = client.get(f"/api/members/{member['member_id']}/qr", headers=headers)
    assert res.status_code == 200
    assert res.mimetype == "image/png"
    assert res.get_data()[:8] == b"\x89PNG\r\n\x1a\n"


def test_validation_error_carries_valid_values(client, container):
    headers = _login(client, container)
    res = client.post("/api/members", json=member_fields(gender="robot"), headers=headers)
    assert res.status_code == 400
    assert res.get_json()["valid_values"] == ["male", "female", "other"]


def test_unknown_member_is_404(client, container):
    headers = _login(client, container)
    res = client.get("/api/members/does-not-exist", headers=headers)
    assert res.status_code == 404
    assert res.get_json() == {"success": False, "message": "Member not found"}
