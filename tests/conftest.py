# ruff: noqa: E402
# IMPORTANT:
# 1) Set environment variables (DATABASE_URL etc.) first, then import application modules.
# 2) anyio_backend must be session-scoped to avoid ScopeMismatch.

from collections.abc import AsyncGenerator
import os

from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# --- Function for early test environment setup ---
# Must be called before any application import reads settings
def _setup_test_environment() -> None:
    os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
    os.environ.setdefault("DB_CHECK_ON_START", "false")
    os.environ.setdefault("DB_CREATE_TABLES", "true")
    os.environ.setdefault("ENVIRONMENT", "development")


_setup_test_environment()


# --- Now safely import the application and dependencies ---
# isort: off
from app import create_app
from core.deps import get_post_repository
from db.database import Base, get_db
from db.models import post as _post_model  # noqa: F401  registers the posts table
from db.repositories.post_repository import InMemoryPostRepository

# isort: on


def _memory_engine() -> AsyncEngine:
    return create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,  # one connection so every session sees the same database
        connect_args={"check_same_thread": False},
    )


# --- Pytest Fixtures ---


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Align anyio_backend scope with anyio plugin expectations."""
    return "asyncio"


@pytest.fixture
def app():
    """FastAPI application instance for tests, created by factory."""
    return create_app()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database per test, bound to the test's event loop."""
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def memory_repo() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
async def override_get_db(app, session_factory: async_sessionmaker[AsyncSession]):
    """
    Override FastAPI dependency to provide a fresh AsyncSession per request,
    all of them talking to the per-test in-memory database.
    """

    async def _get_db_test() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db_test
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client(app, override_get_db: None) -> AsyncGenerator[AsyncClient]:
    """
    HTTP client over the full stack (SQL repository, SQLite) with lifespan management.
    Redirects are not followed so tests can assert on 302 locations.
    """
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac


@pytest.fixture
async def unit_client(app, memory_repo: InMemoryPostRepository) -> AsyncGenerator[AsyncClient]:
    """
    Lightweight HTTP client without lifespan; the repository is the in-memory fake.
    """
    app.dependency_overrides[get_post_repository] = lambda: memory_repo
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_post_repository, None)
