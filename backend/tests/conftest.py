"""Root conftest — shared DB, app, and identity fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB
    - db_manager patched so readiness probes see the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - Users and credentials seeded through SqlIdentityRepository, the same
      code path the provisioning command uses
"""

import os

os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

import tasktracker.models  # noqa: E402,F401
import tasktracker.infrastructure.database as db_module  # noqa: E402
from tasktracker.db.base import Base  # noqa: E402
from tasktracker.infrastructure.database import (  # noqa: E402
    get_db, DatabaseSessionManager,
)
from tasktracker.infrastructure.identity_repository import (  # noqa: E402
    SqlIdentityRepository,
)
from tasktracker.main import app  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def app_transport(test_engine, test_session_factory):
    """ASGI transport into the app with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    yield ASGITransport(app=app)

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def client(app_transport):
    """Raw HTTP client against the app."""
    async with AsyncClient(
        transport=app_transport, base_url="http://test",
    ) as c:
        yield c


async def _seed_identity(session_factory, name: str, email: str) -> dict:
    async with session_factory() as db:
        identity = SqlIdentityRepository(db)
        user = await identity.create_user(name, email)
        token = await identity.issue_token(user.id)
    return {
        "user": user,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture
async def alice(test_session_factory):
    return await _seed_identity(test_session_factory, "Alice", "alice@example.com")


@pytest.fixture
async def bob(test_session_factory):
    return await _seed_identity(test_session_factory, "Bob", "bob@example.com")
