"""Shared pytest fixtures."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from edushare.api.v1 import deps, messages_router, conversations_router, users_router
from edushare.db.connection import DatabaseConnection


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def api_app(db_conn):
    """Test app without lifespan, wired to the fresh database."""
    deps.db_conn = db_conn

    test_app = FastAPI(title="EduShare Test")
    test_app.include_router(messages_router)
    test_app.include_router(conversations_router)
    test_app.include_router(users_router)

    yield test_app

    deps.db_conn = None


@pytest.fixture
async def client(api_app):
    """Async HTTP client for the test app."""
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
