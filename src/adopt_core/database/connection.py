"""
Async engine construction.

PostgreSQL (asyncpg) is the production target. SQLite (aiosqlite) backs
local development and the test suite, and needs a few connection tweaks
so foreign keys and savepoints behave like they do on Postgres.
"""

import asyncio
import logging
import time
from typing import Any, Dict
from urllib.parse import urlparse

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, StaticPool

from ..exceptions import ConnectionException, DatabaseConfigException
from ..utils.config import ConfigError, DatabaseConfig

logger = logging.getLogger(__name__)


def _on_sqlite_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # pysqlite's implicit BEGIN breaks SAVEPOINT; SQLAlchemy emits BEGIN itself
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn: Any) -> None:
    conn.exec_driver_sql("BEGIN")


def _engine_options(config: DatabaseConfig) -> Dict[str, Any]:
    if not config.is_sqlite:
        return {
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
            "pool_timeout": config.pool_timeout,
            "pool_recycle": config.pool_recycle,
            "pool_pre_ping": True,
        }
    # An in-memory database lives and dies with its single connection
    in_memory = ":memory:" in config.url or config.url.endswith("://")
    return {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool if in_memory else NullPool,
    }


def create_engine_from_config(config: DatabaseConfig) -> AsyncEngine:
    """Build an engine for ``config``, wiring the SQLite listeners when needed."""
    engine = create_async_engine(config.url, echo=config.echo, **_engine_options(config))
    if config.is_sqlite:
        event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(engine.sync_engine, "begin", _on_sqlite_begin)

    logger.info(f"Created async database engine for {urlparse(config.url).hostname or 'sqlite'}")
    return engine


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an engine straight from a URL with default pool settings.

    Raises:
        DatabaseConfigException: If the URL is not PostgreSQL or SQLite
    """
    try:
        config = DatabaseConfig(url=database_url, echo=echo)
    except ConfigError as e:
        raise DatabaseConfigException(f"Invalid database URL: {e.message}", config_key="DATABASE_URL")
    return create_engine_from_config(config)


async def check_connection(
    engine: AsyncEngine, max_retries: int = 3, retry_delay: float = 1.0
) -> bool:
    """
    Run ``SELECT 1``, retrying with exponential backoff.

    Returns:
        True once a query succeeds, False when every attempt failed
    """
    for attempt in range(max_retries + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            if attempt == max_retries:
                logger.error(f"Database unreachable after {attempt + 1} attempts: {e}")
                return False
            logger.warning(f"Database check {attempt + 1}/{max_retries + 1} failed: {e}")
            await asyncio.sleep(retry_delay * (2**attempt))
    return False


async def wait_for_database(
    engine: AsyncEngine, timeout: float = 30.0, check_interval: float = 1.0
) -> bool:
    """
    Poll until the database answers.

    Raises:
        ConnectionException: If it is still unreachable after ``timeout`` seconds
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if await check_connection(engine, max_retries=0):
            return True
        await asyncio.sleep(check_interval)

    raise ConnectionException(
        f"Database did not become available within {timeout} seconds",
        database_url=str(engine.url),
    )


async def close_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("Database engine closed")
