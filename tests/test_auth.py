"""Tests for admin login and token validation."""
from datetime import timedelta

from app.services.auth.auth_service import AuthService


def login(client, password="correct-horse", username="owner"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_login_returns_token(public_client, admin):
    response = login(public_client)
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert AuthService.decode_access_token(body["access_token"])["sub"] == str(admin.id)


def test_login_wrong_password(public_client, admin):
    assert login(public_client, password="wrong-password").status_code == 401


def test_login_unknown_user(public_client, admin):
    assert login(public_client, username="nobody").status_code == 401


def test_token_unlocks_admin_routes(public_client, admin):
    token = login(public_client).json()["access_token"]
    response = public_client.get(
        "/api/availability/admin",
        params={"day": "2099-03-02"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200


def test_expired_token_is_rejected(public_client, admin):
    token = AuthService.create_access_token(admin, expires_delta=timedelta(minutes=-1))
    response = public_client.get(
        "/api/availability/admin",
        params={"day": "2099-03-02"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


def test_garbage_token_is_rejected(public_client):
    response = public_client.get(
        "/api/bookings", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401
