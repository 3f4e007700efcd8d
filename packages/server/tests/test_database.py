"""Tests for engine construction and session units of work."""

from unittest.mock import patch

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import select

from codecorps.core import database
from codecorps.core.config import Settings
from codecorps.core.database import build_engine, build_session_factory
from codecorps.models.user import User


async def test_in_memory_sqlite_shares_one_connection():
    engine = build_engine(Settings(_env_file=None, database_url="sqlite+aiosqlite://"))
    assert isinstance(engine.sync_engine.pool, StaticPool)
    await engine.dispose()


async def test_file_sqlite_keeps_default_pool(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'codecorps.db'}"
    engine = build_engine(Settings(_env_file=None, database_url=url))
    assert not isinstance(engine.sync_engine.pool, StaticPool)
    await engine.dispose()


class TestSessionContext:
    async def test_commits_on_success(self, engine):
        factory = build_session_factory(engine)
        with patch.object(database, "async_session_factory", factory):
            async with database.get_session_context() as session:
                session.add(User(email="a@codecorps.org", username="a", normalized_username="a"))

        async with factory() as session:
            result = await session.execute(select(User))
            assert [u.email for u in result.scalars()] == ["a@codecorps.org"]

    async def test_rolls_back_on_error(self, engine):
        factory = build_session_factory(engine)
        with patch.object(database, "async_session_factory", factory):
            with pytest.raises(RuntimeError):
                async with database.get_session_context() as session:
                    session.add(User(email="b@codecorps.org", username="b", normalized_username="b"))
                    await session.flush()
                    raise RuntimeError("boom")

        async with factory() as session:
            result = await session.execute(select(User))
            assert result.scalars().all() == []
