"""Alembic environment for the adoption database (async engine)."""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Importing the package registers every model on the shared metadata
from adopt_core.models import BaseModel
from adopt_core.utils.config import DatabaseConfig

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = BaseModel.metadata


def resolve_url() -> str:
    """An ``sqlalchemy.url`` set in alembic.ini wins; otherwise DATABASE_URL."""
    return config.get_main_option("sqlalchemy.url") or DatabaseConfig.from_environment().url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def offline() -> None:
    """Write the migration SQL to stdout without connecting."""
    url = resolve_url()
    _configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )


def _migrate(connection: Connection) -> None:
    # SQLite cannot ALTER most constraints in place
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")


async def online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = resolve_url()
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    offline()
else:
    asyncio.run(online())
