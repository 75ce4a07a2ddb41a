from datetime import date
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import classboard.core.models  # noqa: F401  (register mappers)
from classboard.core.clock import FixedClock, get_clock
from classboard.db.session import Base, get_db, get_session_factory
from classboard.main import app
from classboard.realtime.feed import snapshot_cache


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
# A directory that does not exist, so every connection attempt fails like an unreachable server.
OFFLINE_DATABASE_URL = "sqlite+aiosqlite:////nonexistent-classboard-dir/classboard.db"

# Wednesday. The following Monday is 2026-10-19.
TODAY = date(2026, 10, 14)
NEXT_MONDAY = date(2026, 10, 19)
CLASS_ID = "class-3a"


@pytest.fixture(autouse=True)
def clear_snapshot_cache():
    snapshot_cache.clear()
    yield
    snapshot_cache.clear()


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test. StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


def _override_dependencies(factory: async_sessionmaker) -> None:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: factory
    app.dependency_overrides[get_clock] = lambda: FixedClock(TODAY)


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    _override_dependencies(session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def offline_factory() -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine(OFFLINE_DATABASE_URL, echo=False, future=True)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def offline_client(offline_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Client whose database can never be reached."""
    _override_dependencies(offline_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
