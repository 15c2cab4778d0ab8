from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from src.fleet_manager.database.dependencies import verify_database
from src.fleet_manager.main import app
from tests.mocks.config_mocks import mock_get_settings  # noqa: F401

# -----------------------------------------------------------------------------
# FASTAPI CLIENT FOR API TESTING
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_openapi_schema():
    app.openapi_schema = None
    yield
    app.openapi_schema = None


@pytest.fixture
def mock_db_session():
    return AsyncMock()


@pytest.fixture(scope="function")
async def async_client(mock_db_session):
    """
    Provide an async client for FastAPI test with lifespan events.
    The database dependency hands out a mocked session.
    """

    @asynccontextmanager
    async def test_lifespan(_):
        yield

    async def override_verify_database():
        yield mock_db_session

    app.router.lifespan_context = test_lifespan
    app.dependency_overrides[verify_database] = override_verify_database
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    app.dependency_overrides.clear()
