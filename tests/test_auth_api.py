"""
Authentication API: registration, login, token checks and profile lookup.
"""

import uuid
from datetime import timedelta

from fastapi.testclient import TestClient

from app.utils.auth import create_access_token, extract_user_id_from_token

from .helpers import auth, register


def test_health_check(client: TestClient):
    response = client.get("/api/")
    assert response.status_code == 200
    assert response.json() == {"message": "TaskFlow API is running!"}


def test_register_returns_token_and_public_user(client: TestClient):
    response = client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"token", "user"}
    assert set(body["user"]) == {"id", "name", "email"}
    assert body["user"]["name"] == "Alice"
    assert body["user"]["email"] == "alice@x.com"
    assert str(extract_user_id_from_token(body["token"])) == body["user"]["id"]


def test_register_normalizes_email(client: TestClient):
    response = client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "  Alice@X.com ", "password": "pw123"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "alice@x.com"


def test_register_duplicate_email_is_rejected(client: TestClient):
    register(client, "Alice", "alice@x.com")
    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "ALICE@x.com", "password": "another"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}


def test_register_missing_fields(client: TestClient):
    response = client.post("/api/auth/register", json={"email": "a@x.com"})
    assert response.status_code == 400
    assert "error" in response.json()

    response = client.post(
        "/api/auth/register", json={"name": "A", "email": "a@x.com", "password": ""}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Password is required"}


def test_register_rejects_password_over_bcrypt_limit(client: TestClient):
    response = client.post(
        "/api/auth/register",
        json={"name": "A", "email": "a@x.com", "password": "x" * 73},
    )
    assert response.status_code == 400


def test_login_success(client: TestClient):
    register(client, "Alice", "alice@x.com", "pw123")
    response = client.post(
        "/api/auth/login", json={"email": "alice@x.com", "password": "pw123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "alice@x.com"
    assert extract_user_id_from_token(body["token"]) is not None


def test_login_failures_share_one_message(client: TestClient):
    """Wrong password and unknown email must be indistinguishable."""
    register(client, "Alice", "alice@x.com", "pw123")

    wrong_password = client.post(
        "/api/auth/login", json={"email": "alice@x.com", "password": "nope"}
    )
    unknown_email = client.post(
        "/api/auth/login", json={"email": "nobody@x.com", "password": "pw123"}
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        "error": "Invalid credentials"
    }


def test_me_returns_profile(client: TestClient, alice_token: str):
    response = client.get("/api/auth/me", headers=auth(alice_token))
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Alice"
    assert user["email"] == "alice@x.com"
    assert "createdAt" in user
    assert "hashedPassword" not in user


def test_missing_token_is_rejected(client: TestClient):
    for method, path in [
        ("GET", "/api/auth/me"),
        ("GET", "/api/tasks"),
        ("POST", "/api/tasks"),
        ("GET", "/api/categories"),
        ("GET", "/api/analytics"),
    ]:
        response = client.request(method, path)
        assert response.status_code == 401, path
        assert response.json() == {"error": "Please authenticate"}


def test_malformed_token_is_rejected(client: TestClient):
    response = client.get("/api/tasks", headers=auth("not-a-jwt"))
    assert response.status_code == 401
    assert response.json() == {"error": "Please authenticate"}


def test_expired_token_is_rejected(client: TestClient, alice_token: str):
    user_id = extract_user_id_from_token(alice_token)
    expired = create_access_token(
        {"sub": str(user_id)}, expires_delta=timedelta(seconds=-5)
    )
    response = client.get("/api/tasks", headers=auth(expired))
    assert response.status_code == 401
    assert response.json() == {"error": "Please authenticate"}


def test_token_signed_with_other_secret_is_rejected(client: TestClient):
    from jose import jwt

    forged = jwt.encode({"sub": str(uuid.uuid4())}, "wrong-secret", algorithm="HS256")
    response = client.get("/api/auth/me", headers=auth(forged))
    assert response.status_code == 401


def test_me_for_deleted_account_is_not_found(client: TestClient):
    token = create_access_token({"sub": str(uuid.uuid4())})
    response = client.get("/api/auth/me", headers=auth(token))
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}
