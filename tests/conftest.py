"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before anything imports config.settings
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_common.database import get_db_session


@pytest.fixture
def db() -> AsyncMock:
    """Stand-in AsyncSession: commit / rollback are awaitable no-ops."""
    return AsyncMock()


@pytest.fixture
async def client(db: AsyncMock) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints (DB dependency overridden)."""

    async def _override_db():
        yield db

    app.dependency_overrides[get_db_session] = _override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

