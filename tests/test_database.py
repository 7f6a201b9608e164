"""
Tests for engine creation, session management and migrations.
"""

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.pool import StaticPool

from adopt_core.database import (
    SessionManager,
    check_connection,
    create_engine,
    wait_for_database,
)
from adopt_core.database.migrations import MigrationManager
from adopt_core.exceptions import ConnectionException, DatabaseConfigException
from adopt_core.models import BaseModel, Pet, Rescue, User, UserRole
from adopt_core.seed import seed_database


class TestEngine:
    """Test engine creation."""

    async def test_in_memory_sqlite_shares_one_connection(self, test_engine):
        assert isinstance(test_engine.pool, StaticPool)
        assert await check_connection(test_engine, max_retries=0)
        assert await wait_for_database(test_engine, timeout=1)

    def test_invalid_url(self):
        with pytest.raises(DatabaseConfigException):
            create_engine("mysql://root@localhost/adopt")

    async def test_wait_for_unreachable_database(self, tmp_path):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'adopt.db'}")

        try:
            assert not await check_connection(engine, max_retries=1, retry_delay=0)
            with pytest.raises(ConnectionException):
                await wait_for_database(engine, timeout=0.05, check_interval=0.01)
        finally:
            await engine.dispose()

    async def test_foreign_keys_enforced(self, test_engine):
        async with test_engine.connect() as conn:
            enabled = (await conn.execute(text("PRAGMA foreign_keys"))).scalar_one()
        assert enabled == 1


class TestSessionManager:
    """Test session and transaction helpers."""

    async def test_health_check(self, session_manager):
        health = await session_manager.health_check()

        assert health["status"] == "healthy"
        assert health["checks"]["basic_query"]["status"] == "pass"

    async def test_session_rolls_back_on_error(self, session_manager, rescue_factory):
        with pytest.raises(RuntimeError):
            async with session_manager.get_session() as session:
                await rescue_factory.create(session)
                raise RuntimeError("boom")

        async with session_manager.get_session() as session:
            assert await session.scalar(select(func.count()).select_from(Rescue)) == 0

    async def test_transaction_commits(self, session_manager, rescue_factory):
        async with session_manager.get_transaction() as session:
            await rescue_factory.create(session, name="Committed Rescue")

        async with session_manager.get_session() as session:
            names = (await session.scalars(select(Rescue.name))).all()
        assert names == ["Committed Rescue"]

    async def test_health_check_reports_unreachable_database(self, tmp_path):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'adopt.db'}")
        manager = SessionManager(engine)

        try:
            health = await manager.health_check()
        finally:
            await manager.close_all_sessions()

        assert health["status"] == "unhealthy"
        assert health["checks"]["basic_query"]["status"] == "fail"

    async def test_initialize_database(self):
        engine = create_engine("sqlite+aiosqlite:///:memory:")
        manager = SessionManager(engine)

        try:
            await manager.initialize_database(BaseModel.metadata)
            assert manager.is_initialized
            async with manager.get_session() as session:
                assert await session.scalar(select(func.count()).select_from(Rescue)) == 0
        finally:
            await manager.close_all_sessions()


class TestMigrations:
    """Test the Alembic wrapper."""

    def test_head_revision(self):
        assert MigrationManager().get_head_revision() == "001"

    def test_upgrade_sqlite_file(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}"

        MigrationManager(database_url=url).upgrade()

        assert (tmp_path / "migrated.db").exists()


class TestSeed:
    """Test the demo data loader."""

    async def test_seed_is_repeatable(self, session, settings):
        first = await seed_database(session, settings)
        second = await seed_database(session, settings)

        assert first == second == {"rescues": 3, "users": 6, "pets": 15}
        rescue_users = (
            await session.scalars(select(User).where(User.role == UserRole.RESCUE))
        ).all()
        assert len(rescue_users) == 3
        assert all(user.rescue_id is not None for user in rescue_users)
        assert await session.scalar(select(func.count()).select_from(Pet)) == 15
