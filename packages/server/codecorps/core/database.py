"""
Async engine and sessions for the Code Corps database.

Each session is one unit of work: it commits when the caller finishes and
rolls back on any error, including the ValidationFailed raised after a
unique-index conflict.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from codecorps.core.config import Settings, get_settings

log = structlog.get_logger()


def build_engine(settings: Settings) -> AsyncEngine:
    """Engine for ``settings.database_url``.

    An in-memory SQLite database only lives as long as its connection, so it
    gets a single shared connection.
    """
    url = make_url(settings.database_url)
    options: dict = {"echo": settings.debug}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_settings())
async_session_factory = build_session_factory(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the users, organizations, memberships and Stripe account tables."""
    import codecorps.models  # noqa: F401  registers every table on the metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    log.info("database.initialized", tables=sorted(SQLModel.metadata.tables))


@asynccontextmanager
async def get_session_context() -> AsyncIterator[AsyncSession]:
    """Unit of work for scripts and other callers outside a request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            log.info("database.rolled_back", error=type(exc).__name__)
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one unit of work per request."""
    async with get_session_context() as session:
        yield session
