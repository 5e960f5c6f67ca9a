"""Async database engine and session management.

Configures the SQLAlchemy async engine and provides dependency injection for
database sessions. PostgreSQL (asyncpg) is the default; any async URL in
DATABASE_DSN, such as sqlite+aiosqlite, works as well.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from jobtrail.core.config import settings

_engine_kwargs: dict = {"echo": settings.environment == "development"}
if not settings.database_url.startswith("sqlite"):
    _engine_kwargs["pool_pre_ping"] = True

engine = create_async_engine(settings.database_url, **_engine_kwargs)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
