from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, nullcontext
import inspect
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

if not settings.database:
    raise RuntimeError("Database configuration not initialized")

# Capture non-None database config for type checkers
DB_CFG = settings.database
assert DB_CFG is not None


def _to_async_dsn(url: str) -> str:
    if "+asyncpg" in url or "+aiosqlite" in url:
        return url
    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _shares_one_connection(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def _engine_options(url: str) -> dict[str, Any]:
    """Pool settings for the target backend; SQLite has no server-side pool to tune."""
    if url.startswith("sqlite"):
        options: dict[str, Any] = {"echo": DB_CFG.echo}
        if _shares_one_connection(url):
            # One shared connection, otherwise every session sees its own empty database
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        return options
    return {
        "echo": DB_CFG.echo,
        "pool_size": DB_CFG.pool_size,
        "max_overflow": DB_CFG.max_overflow,
        "pool_pre_ping": DB_CFG.pool_pre_ping,
        "pool_timeout": DB_CFG.pool_timeout,
        "pool_recycle": 3600,
    }


ASYNC_DATABASE_URL = _to_async_dsn(DB_CFG.url)

# Lazy engine/sessionmaker to avoid creating pools at import time.
# Public alias for tests: unit tests monkeypatch `db.database.engine`.
engine: AsyncEngine | None = None
_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None
_session_lock: asyncio.Lock | None = None


def get_engine() -> AsyncEngine:
    global _engine
    # If a test has monkeypatched the public `engine`, use it.
    if engine is not None:
        return engine
    if _engine is None:
        _engine = create_async_engine(ASYNC_DATABASE_URL, **_engine_options(ASYNC_DATABASE_URL))
        logger.debug("AsyncEngine created")
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
        logger.debug("Async sessionmaker created")
    return _session_maker


def _session_guard() -> AbstractAsyncContextManager:
    """Serialise sessions when every session shares one in-memory connection.

    Otherwise a rollback in one request would discard another request's
    uncommitted writes on the same connection.
    """
    global _session_lock
    if not _shares_one_connection(ASYNC_DATABASE_URL):
        return nullcontext()
    if _session_lock is None:
        _session_lock = asyncio.Lock()
    return _session_lock


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with _session_guard(), get_session_maker()() as session:
        try:
            logger.debug("Async database session created")
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Error in async DB session: %s", e)
            raise
        finally:
            logger.debug("Async database session closed")


async def create_tables() -> None:
    """Create tables for every registered model that does not exist yet."""
    # Register models with Base before create_all
    from db.models import post as _post_model  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def check_db_connection() -> bool:
    try:
        engine = get_engine()
        ctx = engine.begin()
        # Support both real AsyncEngine (returns async context manager)
        # and test mocks that return a coroutine yielding a context manager
        if inspect.isawaitable(ctx):
            ctx = await ctx  # type: ignore[assignment]
        async with ctx as conn:  # type: ignore[func-returns-value]
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection is healthy")
        return True
    except Exception as e:
        logger.error("Database connection check failed: %s", e)
        return False


async def close_db_connections() -> None:
    global engine, _engine, _session_maker, _session_lock
    try:
        if engine is not None:
            await engine.dispose()
            logger.info("Database connections (public engine) closed")
        if _engine is not None:
            await _engine.dispose()
            logger.info("Database connections (private engine) closed")
    except Exception as e:
        logger.error("Error closing database connections: %s", e)
    finally:
        engine = None
        _engine = None
        _session_maker = None
        _session_lock = None
