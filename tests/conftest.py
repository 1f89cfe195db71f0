"""
Jojárts API — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the whole suite.
How:   Each test that needs storage gets its own SQLite file under pytest's
       tmp_path (aiosqlite driver), so tests never share rows.

Fixture Hierarchy (all function-scoped):
    test_settings ─┬─ database ── db_session       service tests on real SQL
                   └─ app ── test_client ── auth_headers
    mock_db_session                                  failure-path unit tests
    token_service                                    standalone JWT tests
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Environment must be set before any app import: app.main builds the
# module-level application from it
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="jojarts_test_"), "module_app.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.database import Database
from app.services.token_service import TokenService

TEST_SECRET = "unit-test-secret"
ADMIN_USER = "admin"
ADMIN_PASS = "123"


# ══════════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════════

def make_settings(database_url: str, **overrides) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    values = {
        "database_url": database_url,
        "jwt_secret": TEST_SECRET,
        "admin_user": ADMIN_USER,
        "admin_pass": ADMIN_PASS,
        "bcrypt_rounds": 4,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def test_settings(sqlite_url):
    return make_settings(sqlite_url)


# ══════════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(test_settings):
    """A migrated, empty database."""
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """
    A session on the test database.

    Services only flush; tests that need data visible to a second session
    commit explicitly.
    """
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        with pytest.raises(DatabaseError): ...
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Services
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(test_settings):
    from app.main import create_app
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not send lifespan events, so the fixture enters the
    lifespan itself: ping, create tables, bootstrap admin/123.
    """
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest_asyncio.fixture
async def auth_headers(test_client):
    response = await test_client.post(
        "/api/auth/login",
        json={"username": ADMIN_USER, "password": ADMIN_PASS},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
