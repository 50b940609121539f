"""
Shared fixtures: in-memory and file-backed SQLite databases, API client
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from metering import models  # noqa: F401
from metering.api.dependencies import get_db, get_rate_limiter
from metering.core.config import settings
from metering.db.base import Base
from metering.main import app
from metering.services.rate_limit_service import RateLimitService
from metering.services.settings_service import SettingsService


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Database session for a single test"""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """
    File-backed SQLite session factory where every session gets its own
    connection, for tests that exercise concurrent writers
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"timeout": 30},
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Enforcement settings are cached per process; start every test clean"""
    SettingsService.invalidate_cache()
    yield
    SettingsService.invalidate_cache()


@pytest.fixture
def admin_key(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", "test-admin-key")
    return "test-admin-key"


@pytest_asyncio.fixture
async def client(db_session):
    """API client bound to the test database, with rate ceilings disabled"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: RateLimitService(redis_client=None)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
