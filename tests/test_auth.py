"""
Tests for authentication, role guards and password reset.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from hrms.core.security import create_access_token, decode_access_token
from hrms.models.user import PasswordResetToken

PASSWORD = "Str0ng!Pass"


@pytest.mark.asyncio
async def test_protected_route_without_token_is_401(async_client: AsyncClient):
    """GET /employees without a bearer token should be rejected."""
    resp = await async_client.get("/api/employees")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "No token provided"
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_garbage_token_is_401(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/employees", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_expired_token_is_401(async_client: AsyncClient, make_user):
    user, _ = await make_user("expired@example.com", "hr_executive")
    token = create_access_token(
        user.id, user.email, user.role, expires_delta=timedelta(seconds=-1)
    )
    assert decode_access_token(token) is None
    resp = await async_client.get(
        "/api/employees", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_hr_can_list_employees(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.get("/api/employees", headers=hr_headers)
    assert resp.status_code == 200
    assert isinstance(resp.json(), list)


@pytest.mark.asyncio
async def test_login_returns_token_with_role(async_client: AsyncClient, make_user):
    """POST /auth/login should return a token whose claims match the user."""
    user, _ = await make_user("login@example.com", "hr_executive")
    resp = await async_client.post(
        "/api/auth/login", json={"email": "Login@Example.com", "password": PASSWORD}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"] == {"id": user.id, "email": "login@example.com", "role": "hr_executive"}

    claims = decode_access_token(data["token"])
    assert claims is not None
    assert claims["role"] == "hr_executive"
    assert claims["id"] == user.id
    assert claims["type"] == "access"


@pytest.mark.asyncio
async def test_login_wrong_password_is_401(async_client: AsyncClient, make_user):
    await make_user("wrong@example.com", "admin")
    resp = await async_client.post(
        "/api/auth/login", json={"email": "wrong@example.com", "password": "Nope!1234"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_missing_password_is_400(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/login", json={"email": "a@example.com"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_me_echoes_token_identity(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.get("/api/auth/me", headers=hr_headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "hr@example.com"
    assert resp.json()["role"] == "hr_executive"


@pytest.mark.asyncio
async def test_token_identity_is_not_looked_up(async_client: AsyncClient):
    """A valid token for a user id absent from the database still authenticates."""
    token = create_access_token(999, "ghost@example.com", "admin")
    resp = await async_client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == 999


# ── Registration ────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_admin_registers_user(async_client: AsyncClient, admin_headers: dict):
    payload = {"email": "new@example.com", "password": PASSWORD, "role": "hr_executive"}
    resp = await async_client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["role"] == "hr_executive"
    assert "hashed_password" not in resp.json()

    dup = await async_client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert dup.status_code == 400
    assert dup.json()["detail"] == "User already exists"


@pytest.mark.asyncio
async def test_hr_cannot_register_users(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.post(
        "/api/auth/register",
        json={"email": "x@example.com", "password": PASSWORD},
        headers=hr_headers,
    )
    assert resp.status_code == 403
    assert resp.json()["detail"].startswith("Access denied. Required role: admin")


@pytest.mark.asyncio
async def test_register_first_only_allows_hr(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/auth/register-first",
        json={"email": "boss@example.com", "password": PASSWORD, "role": "admin"},
    )
    assert resp.status_code == 403

    resp = await async_client.post(
        "/api/auth/register-first",
        json={"email": "first@example.com", "password": PASSWORD, "role": "hr_executive"},
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "hr_executive"


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
async def test_weak_password_rejected(async_client: AsyncClient, password: str):
    resp = await async_client.post(
        "/api/auth/register-first",
        json={"email": "weak@example.com", "password": password},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_unknown_role_rejected(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.post(
        "/api/auth/register",
        json={"email": "r@example.com", "password": PASSWORD, "role": "superuser"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


# ── Password reset ──────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_password_reset_flow(async_client: AsyncClient, make_user, db_session):
    """A reset token should work exactly once and change the login password."""
    await make_user("reset@example.com", "hr_executive")

    resp = await async_client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    assert resp.status_code == 200
    assert resp.json()["reset_link"] is not None

    token = (await db_session.execute(select(PasswordResetToken.token))).scalar_one()
    new_password = "N3w!Password"
    resp = await async_client.post(
        "/api/auth/reset-password", json={"token": token, "password": new_password}
    )
    assert resp.status_code == 200

    again = await async_client.post(
        "/api/auth/reset-password", json={"token": token, "password": new_password}
    )
    assert again.status_code == 400

    login = await async_client.post(
        "/api/auth/login", json={"email": "reset@example.com", "password": new_password}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_forgot_password_unknown_email_is_generic(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert resp.status_code == 200
    assert resp.json()["reset_link"] is None
