"""Shared test fixtures."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.api.routes import health, mappings, servers
from embytag.database import build_engine, build_session_factory, get_db
from embytag.models import Base


@pytest.fixture
def test_app() -> FastAPI:
    """Minimal FastAPI app without the lifespan, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(servers.router, prefix="/api")
    app.include_router(mappings.router, prefix="/api")
    return app


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory SQLite database."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def client(test_app: FastAPI, db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for ``test_app`` with ``get_db`` bound to the SQLite session."""

    async def override() -> AsyncGenerator[AsyncSession, None]:
        yield db

    test_app.dependency_overrides[get_db] = override
    try:
        async with AsyncClient(
            transport=ASGITransport(app=test_app), base_url="http://test"
        ) as http:
            yield http
    finally:
        test_app.dependency_overrides.clear()
