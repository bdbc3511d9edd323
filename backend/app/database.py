"""
Employee Dashboard Backend — Database Session Management
=========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   create_app() builds one engine and session factory from the Settings
       it was given and stores them on app.state; the session dependency
       reads them from the request's app.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created with the app; sessions are created per-request.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (used by the test suite) get none of the sizing arguments:
    the aiosqlite dialect picks its own pool class and rejects them.
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings


def build_engine(app_settings: Settings) -> AsyncEngine:
    """
    Create an async engine for `app_settings.database_url`.

    Pool sizing only applies to server databases; SQLite gets the dialect
    defaults.
    """
    kwargs: Dict[str, Any] = {
        # Echo SQL only when debugging; it is very noisy otherwise
        "echo": app_settings.log_level == "DEBUG",
    }
    if not app_settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=app_settings.db_pool_size,
            max_overflow=app_settings.db_max_overflow,
            pool_pre_ping=app_settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(app_settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: the service commits and then serializes the same
    # Employee instance; without it every attribute access would re-query.
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    the test suite uses to create tables.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's factory
        2. Yields it to the route handler
        3. On success: commits anything still pending
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    EmployeeService commits each mutation itself, so the commit here is
    normally a no-op; it remains as the safety net for read paths.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
