"""Async engine, session factory and the FastAPI session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from embytag.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for a SQLAlchemy URL.

    In-memory SQLite databases live in a single shared connection so every
    session sees the same tables.
    """
    if database_url.startswith("sqlite") and (
        database_url.endswith("://") or ":memory:" in database_url
    ):
        return create_async_engine(database_url, poolclass=StaticPool)
    return create_async_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; sync passes and batches keep using them
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


engine = build_engine(settings.database_url)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session, committing when the request succeeds."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
