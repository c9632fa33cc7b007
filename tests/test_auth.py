from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from booktrack.security.hash import hash_password, verify_password
from booktrack.security.jwt import InvalidTokenError, create_access_token, decode_token, get_jwt_settings

REGISTRATION = {
    "email": "user@example.com",
    "fullName": "Example User",
    "password": "Str0ngPassword",
}


def test_password_hashing_roundtrip():
    password = "s3cureP@ss!"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrong-password", hashed)
    assert not verify_password(password, "not-a-bcrypt-hash")


def test_token_roundtrip_carries_user_id():
    settings = get_jwt_settings()
    token = create_access_token(subject=42, settings=settings)

    assert decode_token(token, settings).user_id == 42


def test_register_and_duplicate_email(client: TestClient):
    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    data = body["data"]
    assert data["email"] == "user@example.com"
    assert data["fullName"] == "Example User"
    assert isinstance(data["userId"], int)
    assert data["token"]
    assert "password" not in data
    assert "passwordHash" not in data

    duplicate = client.post("/api/auth/register", json={**REGISTRATION, "email": "USER@example.com"})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "EMAIL_EXISTS"


def test_register_rejects_weak_password(client: TestClient):
    response = client.post("/api/auth/register", json={**REGISTRATION, "password": "weakpass"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"] == [
        {"field": "password", "message": "Password must contain at least one uppercase letter"}
    ]


def test_register_rejects_invalid_full_name(client: TestClient):
    response = client.post("/api/auth/register", json={**REGISTRATION, "fullName": "R2-D2"})

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "fullName"


def test_login_with_wrong_password(client: TestClient, register):
    register("test@example.com", password="CorrectPass1")

    wrong_password = client.post("/api/auth/login", json={"email": "test@example.com", "password": "WrongPass1"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "CorrectPass1"})

    for response in (wrong_password, unknown_email):
        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "INVALID_CREDENTIALS",
            "message": "Invalid email or password",
        }


def test_login_returns_token_accepted_by_verify(client: TestClient, register):
    register("decode@example.com", password="DecodePass1", full_name="Decoder")

    response = client.post("/api/auth/login", json={"email": "Decode@Example.com", "password": "DecodePass1"})
    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"
    token = response.json()["data"]["token"]

    verify = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert verify.status_code == 200
    assert verify.json()["data"] == {
        "userId": response.json()["data"]["userId"],
        "email": "decode@example.com",
        "fullName": "Decoder",
    }


def test_verify_requires_token(client: TestClient):
    response = client.get("/api/auth/verify")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_TOKEN"


def test_expired_token_is_rejected(client: TestClient, register):
    _, user_id = register("expired@example.com")
    expired_settings = get_jwt_settings().model_copy(update={"access_token_exp_minutes": -5})
    token = create_access_token(subject=user_id, settings=expired_settings)

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


def test_token_signed_with_other_secret_is_rejected(client: TestClient, register):
    _, user_id = register("forged@example.com")
    forged_settings = get_jwt_settings().model_copy(update={"secret_key": "someone-else"})
    token = create_access_token(subject=user_id, settings=forged_settings)

    response = client.get("/api/books", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_verify_for_deleted_user(client: TestClient):
    token = create_access_token(subject=9999, settings=get_jwt_settings())

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


def test_signed_token_without_subject_is_rejected(client: TestClient):
    settings = get_jwt_settings()
    token = jwt.encode(
        {"exp": int(time.time()) + 600, "iss": settings.issuer},
        settings.secret_key,
        algorithm=settings.algorithm,
    )

    with pytest.raises(InvalidTokenError):
        decode_token(token, settings)

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"] == {"code": "INVALID_TOKEN", "message": "Invalid token"}
