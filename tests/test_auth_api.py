# tests/test_auth_api.py

"""
Tests for authentication endpoints.
"""

from datetime import timedelta

from jose import jwt

from buildsmart.core.config import settings
from buildsmart.core.roles import Permission, Role
from buildsmart.core.security import create_access_token
from tests.conftest import DEMO_PASSWORD, bearer


def test_login_seeded_admin(client, demo_users):
    """A seeded Admin logs in and gets an Admin token without a password field."""
    response = client.post(
        "/api/auth/login",
        json={"email": "rajesh@buildsmart.in", "password": "demo123"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    claims = jwt.get_unverified_claims(data["token"])
    assert claims["role"] == "Admin"
    assert claims["sub"] == demo_users[Role.ADMIN].id
    assert "password" not in data["user"]
    assert "hashedPassword" not in data["user"]
    assert "hashed_password" not in data["user"]
    assert data["user"]["role"] == "Admin"
    assert data["user"]["lastLogin"] is not None


def test_login_normalizes_email(client, demo_users):
    response = client.post(
        "/api/auth/login",
        json={"email": "  RAJESH@BuildSmart.in ", "password": DEMO_PASSWORD},
    )
    assert response.status_code == 200


def test_wrong_password_and_unknown_email_look_identical(client, demo_users):
    wrong_password = client.post(
        "/api/auth/login",
        json={"email": "rajesh@buildsmart.in", "password": "nope-nope"},
    )
    unknown_email = client.post(
        "/api/auth/login",
        json={"email": "nobody@buildsmart.in", "password": "nope-nope"},
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["code"] == "INVALID_CREDENTIALS"
    assert wrong_password.json() == unknown_email.json()


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"email": "rajesh@buildsmart.in"})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["success"] is False


def test_register_creates_worker(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Sunita Rao", "email": "Sunita@BuildSmart.in", "password": "secret1"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "sunita@buildsmart.in"
    assert data["user"]["role"] == "Worker"
    assert data["user"]["permissions"] == ["view_safety", "upload_photos", "view_my_tasks"]
    assert data["user"]["site"] == settings.DEFAULT_SITE
    assert "password" not in data["user"]
    assert jwt.get_unverified_claims(data["token"])["role"] == "Worker"


def test_self_registration_cannot_pick_admin(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Mallory", "email": "mallory@buildsmart.in", "password": "secret1", "role": "Admin"},
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "Worker"


def test_admin_can_register_other_roles(client, login):
    response = client.post(
        "/api/auth/register",
        json={"name": "Kiran", "email": "kiran@buildsmart.in", "password": "secret1", "role": "Supervisor"},
        headers=bearer(login(Role.ADMIN)),
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "Supervisor"
    assert "assign_tasks" in response.json()["user"]["permissions"]


def test_register_duplicate_email(client, demo_users):
    response = client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "RAJESH@buildsmart.in", "password": "secret1"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "USER_EXISTS"


def test_register_short_password(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Short", "email": "short@buildsmart.in", "password": "abc"},
    )
    assert response.status_code == 400


def test_register_bad_email(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Bad", "email": "not-an-email", "password": "secret12"},
    )
    assert response.status_code == 400


def test_me_requires_authentication(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REQUIRED"


def test_garbage_token_is_treated_as_anonymous(client):
    response = client.get("/api/auth/me", headers=bearer("garbage.token.value"))
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REQUIRED"

    # anonymous-tolerant routes still work with a garbage token
    response = client.post(
        "/api/auth/register",
        json={"name": "Anon", "email": "anon@buildsmart.in", "password": "secret1"},
        headers=bearer("garbage"),
    )
    assert response.status_code == 201


def test_expired_token_is_rejected_with_distinct_code(client, demo_users):
    worker = demo_users[Role.WORKER]
    token = create_access_token(
        worker.id, worker.email, worker.role, worker.permissions,
        expires_delta=timedelta(seconds=-1),
    )

    response = client.get("/api/auth/me", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["code"] == "TOKEN_EXPIRED"

    # expiry is enforced even on routes that allow anonymous access
    response = client.post("/api/auth/demo-login", json={"role": "Worker"}, headers=bearer(token))
    assert response.status_code == 401


def test_me_returns_profile(client, login, demo_users):
    response = client.get("/api/auth/me", headers=bearer(login(Role.SUPERVISOR)))
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == demo_users[Role.SUPERVISOR].id
    assert user["name"] == "Amit Patel"
    assert "password" not in user


def test_me_for_deleted_user(client):
    token = create_access_token("ghost", "ghost@buildsmart.in", Role.WORKER, [])
    response = client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 404


def test_demo_login_each_role(client, demo_users):
    for role in Role:
        response = client.post("/api/auth/demo-login", json={"role": role.value})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Demo login successful"
        assert data["user"]["role"] == role.value
        assert jwt.get_unverified_claims(data["token"])["role"] == role.value


def test_demo_login_unknown_or_missing_role_falls_back_to_worker(client, demo_users):
    assert client.post("/api/auth/demo-login", json={"role": "Foreman"}).json()["user"]["role"] == "Worker"
    assert client.post("/api/auth/demo-login").json()["user"]["role"] == "Worker"


def test_demo_login_does_not_create_users(client, store_factory):
    response = client.post("/api/auth/demo-login", json={"role": "Admin"})
    assert response.status_code == 404
    reader = store_factory()
    try:
        assert reader.users.list() == []
    finally:
        reader.close()


def test_demo_login_can_be_disabled(client, demo_users, monkeypatch):
    monkeypatch.setattr(settings, "DEMO_LOGIN_ENABLED", False)
    response = client.post("/api/auth/demo-login", json={"role": "Admin"})
    assert response.status_code == 403
    assert response.json()["code"] == "DEMO_LOGIN_DISABLED"


def test_refresh_issues_new_token_with_current_permissions(client, login, demo_users):
    supervisor = demo_users[Role.SUPERVISOR]
    old_token = login(Role.SUPERVISOR)

    response = client.put(
        f"/api/users/{supervisor.id}/permissions",
        json={"permissions": ["view_safety", "view_reports"]},
        headers=bearer(login(Role.ADMIN)),
    )
    assert response.status_code == 200

    # the old token still carries the old claims
    assert "assign_tasks" in jwt.get_unverified_claims(old_token)["permissions"]

    response = client.post("/api/auth/refresh", headers=bearer(old_token))
    assert response.status_code == 200
    claims = jwt.get_unverified_claims(response.json()["token"])
    assert claims["permissions"] == [Permission.VIEW_SAFETY.value, Permission.VIEW_REPORTS.value]


def test_refresh_requires_authentication(client):
    response = client.post("/api/auth/refresh")
    assert response.status_code == 401


def test_login_inactive_account(client, login, demo_users):
    worker = demo_users[Role.WORKER]
    client.delete(f"/api/users/{worker.id}", headers=bearer(login(Role.ADMIN)))

    response = client.post(
        "/api/auth/login",
        json={"email": worker.email, "password": DEMO_PASSWORD},
    )
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_INACTIVE"

    # a wrong password on an inactive account reveals nothing about its state
    response = client.post(
        "/api/auth/login",
        json={"email": worker.email, "password": "wrong-one"},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_deactivated_token_is_stale_until_me_or_refresh(client, login, demo_users):
    """Deactivation only bites at /auth/me and /auth/refresh, not on ordinary routes."""
    worker = demo_users[Role.WORKER]
    worker_token = login(Role.WORKER)

    response = client.delete(f"/api/users/{worker.id}", headers=bearer(login(Role.ADMIN)))
    assert response.status_code == 200
    assert response.json()["user"]["isActive"] is False

    assert client.get("/api/tasks", headers=bearer(worker_token)).status_code == 200
    assert client.get("/api/roles/me/dashboard", headers=bearer(worker_token)).status_code == 200

    response = client.get("/api/auth/me", headers=bearer(worker_token))
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_INACTIVE"

    response = client.post("/api/auth/refresh", headers=bearer(worker_token))
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_INACTIVE"
