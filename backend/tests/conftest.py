"""
Employee Dashboard Backend — Test Configuration (conftest.py)
==============================================================

Shared pytest fixtures.

Fixture Hierarchy:
    Unit tests (no database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── make_employee: builds detached Employee ORM instances

    API tests (in-memory SQLite through the real app):
    ├── db_session_factory: fresh schema per test
    ├── app_factory / test_app: app built with test settings, DB dependency overridden
    ├── test_client: HTTPX AsyncClient over ASGITransport
    └── auth_headers: a valid Authorization header
"""

import os

# Settings are read at import time; point them at test values first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_TOKEN"] = "test-token"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base, get_db_session
from app.main import create_app
from app.models.employee import Employee

TEST_TOKEN = "test-token"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = employee
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_employee():
    """Factory for detached Employee rows with every column populated."""

    def _make(**overrides) -> Employee:
        now = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)
        fields = {
            "id": 1,
            "name": "Ada Lovelace",
            "email": "ada@acme.io",
            "position": "Engineer",
            "department": "R&D",
            "salary": Decimal("85000.00"),
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Employee(**fields)

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_session_factory():
    """
    In-memory SQLite with the employees schema, one per test.

    StaticPool keeps a single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


def build_test_app(db_session_factory, **settings_overrides):
    """Create an app wired to the test database with the given settings."""
    values = {"auth_token": TEST_TOKEN, "environment": "test", "log_level": "WARNING"}
    values.update(settings_overrides)
    app_settings = Settings(**values)
    app = create_app(app_settings)

    async def override_get_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    return app


@pytest.fixture
def app_factory(db_session_factory):
    """Builds extra apps over the same test database, e.g. in development mode."""

    def _build(**settings_overrides):
        return build_test_app(db_session_factory, **settings_overrides)

    return _build


@pytest.fixture
def test_app(app_factory):
    return app_factory()


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # The app's own engine only serves /health; the store is overridden
    await test_app.state.engine.dispose()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
