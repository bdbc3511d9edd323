"""
Alembic Migration Environment
===============================

What:  Runs the employees schema migrations against DATABASE_URL.
How:   The URL comes from Settings, never from alembic.ini. Online runs go
       through an async engine and hand a sync connection to Alembic via
       run_sync(). SQLite gets batch mode so ALTER-style operations work.
Who:   `alembic upgrade head` / `alembic revision --autogenerate` from backend/.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from app.config import Settings
from app.database import Base

# Registers the employees table on Base.metadata for --autogenerate
from app.models.employee import Employee  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = Settings().database_url
config.set_main_option("sqlalchemy.url", database_url)


def _configure(**kwargs) -> None:
    # compare_type: NUMERIC(12, 2) and String(255) changes show up in autogenerate
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without connecting."""
    _configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=database_url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(
        connection=connection,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
