"""Tests for registration, login and the authorization gate."""

import pytest
from sqlalchemy import func, select

from conftest import DEFAULT_PASSWORD, bearer, token_from
from saasboard.constants import COOKIE_NAME
from saasboard.models.enums import Role
from saasboard.models.user import User


@pytest.mark.asyncio
async def test_register_creates_user_with_free_subscription(client):
    response = await client.post(
        "/api/auth/register", json={"email": "new@example.com", "password": "secret123", "name": "New"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "USER"
    assert data["user"]["subscription"]["plan"] == "FREE"
    assert data["user"]["subscription"]["status"] == "ACTIVE"
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_register_sets_http_only_cookie(client):
    response = await client.post("/api/auth/register", json={"email": "c@example.com", "password": "secret123"})
    header = next(h for h in response.headers.get_list("set-cookie") if h.startswith(f"{COOKIE_NAME}="))
    assert "httponly" in header.lower()
    assert "samesite=strict" in header.lower()
    assert "max-age=604800" in header.lower()


@pytest.mark.asyncio
async def test_register_rejects_invalid_input(client):
    response = await client.post("/api/auth/register", json={"email": "not-an-email", "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    response = await client.post("/api/auth/register", json={"email": "a@example.com", "password": "123"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(client, register, db_session):
    await register(client, "dup@example.com")
    response = await client.post("/api/auth/register", json={"email": "dup@example.com", "password": "other123"})
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"

    count = await db_session.scalar(select(func.count()).select_from(User).where(User.email == "dup@example.com"))
    assert count == 1


@pytest.mark.asyncio
async def test_login_success(client, register):
    await register(client, "login@example.com")
    response = await client.post(
        "/api/auth/login", json={"email": "login@example.com", "password": DEFAULT_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "login@example.com"
    assert token_from(response)


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client, register):
    await register(client, "known@example.com")
    wrong_password = await client.post(
        "/api/auth/login", json={"email": "known@example.com", "password": "wrongpass"}
    )
    unknown_email = await client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "wrongpass"}
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"


@pytest.mark.asyncio
async def test_me_rejects_bad_token(client):
    response = await client.get("/api/auth/me", headers=bearer("garbage"))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_me_with_bearer_and_cookie(client, register):
    token = await register(client, "me@example.com")

    response = await client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "me@example.com"

    response = await client.get("/api/auth/me", headers={"Cookie": f"{COOKIE_NAME}={token}"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_role_comes_from_database_not_token(client, register, db_session):
    token = await register(client, "promoted@example.com")
    user = await db_session.scalar(select(User).where(User.email == "promoted@example.com"))
    user.role = Role.ADMIN
    await db_session.commit()

    response = await client.get("/api/users", headers=bearer(token))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_logout_clears_cookie(client):
    response = await client.post("/api/auth/logout")
    assert response.status_code == 200
    header = next(h for h in response.headers.get_list("set-cookie") if h.startswith(f"{COOKIE_NAME}="))
    assert "max-age=0" in header.lower()


@pytest.mark.asyncio
async def test_refresh_issues_new_cookie(client, register):
    token = await register(client, "refresh@example.com")
    response = await client.post("/api/auth/refresh", headers=bearer(token))
    assert response.status_code == 200
    assert token_from(response)
