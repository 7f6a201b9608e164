"""
Async session handling for the adoption database.

The API builds one ``SessionManager`` per application and keeps it on
``app.state``; the CLI and the seed loader build short-lived ones around
their own engine.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


class SessionManager:
    """Hands out sessions bound to a single engine."""

    def __init__(self, engine: AsyncEngine, autoflush: bool = True):
        self.engine = engine
        self._is_initialized = False
        # Routes read attributes after commit when serializing responses.
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autoflush=autoflush,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session; roll back if the block raises.

        Nothing is committed here. Services commit or use ``get_transaction``.
        """
        session = self.session_factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Rolling back session after {type(e).__name__}: {e}")
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session inside ``BEGIN``; commits when the block exits cleanly."""
        async with self.get_session() as session:
            async with session.begin():
                yield session

    async def health_check(self) -> Dict[str, Any]:
        """
        Run ``SELECT 1`` and report the outcome.

        Returns:
            ``{"status": "healthy" | "unhealthy", "timestamp": ..., "checks": {...}}``
        """
        report: Dict[str, Any] = {"status": "healthy", "timestamp": time.time(), "checks": {}}
        started = time.perf_counter()
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database readiness check failed: {e}")
            report["status"] = "unhealthy"
            report["checks"]["basic_query"] = {"status": "fail", "error_type": type(e).__name__}
        else:
            report["checks"]["basic_query"] = {
                "status": "pass",
                "response_time": round((time.perf_counter() - started) * 1000, 2),
            }
        return report

    async def initialize_database(self, metadata: MetaData) -> None:
        """Create every table in ``metadata`` that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        self._is_initialized = True
        logger.info(f"Created {len(metadata.tables)} tables")

    async def close_all_sessions(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized
