"""Shared pytest fixtures.

Tests run against an in-memory SQLite database (aiosqlite) unless
TEST_DATABASE_URL points somewhere else, e.g. a PostgreSQL test database.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Configure before any jobtrail import reads the settings
os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPLOAD_ROOT", tempfile.mkdtemp(prefix="jobtrail-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from jobtrail.core.config import settings
from jobtrail.models import Base

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine with a fresh schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def upload_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point file storage at a per-test directory."""
    root = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_root", root)
    return root


@pytest_asyncio.fixture
async def client(db_engine, upload_root) -> AsyncGenerator[AsyncClient, None]:  # noqa: ARG001
    """Async HTTP client for API tests.

    Sets up:
    - Test database connection via dependency override
    - Upload root in a temporary directory
    - httpx.AsyncClient with ASGI transport
    """
    from jobtrail.core.database import get_db
    from jobtrail.main import app

    test_session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Data helpers
# =============================================================================


async def create_application(client: AsyncClient, **fields) -> dict:
    """Create an application through the API and return its data."""
    payload = {"company": "Acme", "position": "Engineer", **fields}
    response = await client.post("/api/v1/applications", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]
