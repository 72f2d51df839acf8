"""
Shared test fixtures for the HRMS test suite.

Each test gets a fresh in-memory SQLite database (aiosqlite) built by the real
schema bootstrap, and real signed tokens for every role.
"""

import os
import sys
import tempfile
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="hrms-uploads-")
os.environ["SECRET_KEY"] = "test-secret-key-for-the-hrms-suite"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from hrms.api.v1.deps import get_db
from hrms.core.security import create_access_token, get_password_hash
from hrms.db.bootstrap import bootstrap_schema
from hrms.main import app
from hrms.models.user import User

PASSWORD = "Str0ng!Pass"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with the full schema."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await bootstrap_schema(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Users & tokens ──────────────────────────────────────────────────
@pytest.fixture
def make_user(session_factory):
    """Factory: persist a user and return ``(user, auth_headers)``."""

    async def _make(email: str, role: str, password: str = PASSWORD):
        async with session_factory() as session:
            user = User(email=email, hashed_password=get_password_hash(password), role=role)
            session.add(user)
            await session.commit()
            await session.refresh(user)
        token = create_access_token(user.id, user.email, user.role)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
async def admin_headers(make_user) -> dict:
    _user, headers = await make_user("admin@example.com", "admin")
    return headers


@pytest.fixture
async def hr_headers(make_user) -> dict:
    _user, headers = await make_user("hr@example.com", "hr_executive")
    return headers


@pytest.fixture
async def accountant_headers(make_user) -> dict:
    _user, headers = await make_user("accounts@example.com", "accountant")
    return headers


# ── Domain helpers ──────────────────────────────────────────────────
@pytest.fixture
def create_employee(async_client: AsyncClient, admin_headers: dict):
    """Factory: create an employee through the API and return its JSON."""
    counter = {"n": 0}

    async def _create(**overrides) -> dict:
        counter["n"] += 1
        payload = {
            "first_name": "Test",
            "last_name": f"Person{counter['n']}",
            "email": f"person{counter['n']}@example.com",
            "department": "Engineering",
            "position": "Developer",
            "hire_date": "2023-01-01",
            "salary": 50000,
        }
        payload.update(overrides)
        resp = await async_client.post("/api/employees", json=payload, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
