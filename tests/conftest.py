"""Pytest configuration for async testing.

Every test gets its own in-memory SQLite database (one shared connection via
StaticPool), so nothing leaks between tests.

Fixtures:
    settings: Settings pointing at the sample application in tests.fixtures.app
    database: Database with every sample table created
    session: AsyncSession on that database
    app: FastAPI app built by create_app()
    client: httpx AsyncClient talking to the app in-process
"""

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from autocrud import create_app
from autocrud.core.config import Settings
from autocrud.core.enums import Environment
from autocrud.infrastructure.persistence import BaseModel, Database
from tests.fixtures.app import models  # noqa: F401  (registers tables)


@pytest.fixture
def settings():
    """Settings for the sample application with web routes enabled."""
    return Settings(
        environment=Environment.TESTING,
        database_url="sqlite+aiosqlite:///:memory:",
        app_package="tests.fixtures.app",
        controller_search_paths=["tests.fixtures.app.controllers"],
        api_allowed_sorts=["title", "id"],
        api_allowed_filters=["status"],
        api_allowed_includes=["comments"],
        api_allowed_fields=["title"],
        web_enabled=True,
        session_secret_key="test-secret",
    )


@pytest.fixture
def logger():
    """Mock logger implementing LoggerProtocol."""
    mock = MagicMock()
    mock.bind.return_value = mock
    return mock


@pytest_asyncio.fixture
async def database(settings):
    """In-memory database with the sample tables created."""
    db = Database(settings.database_url)
    await db.create_all(BaseModel)
    yield db
    await db.drop_all(BaseModel)
    await db.close()


@pytest_asyncio.fixture
async def session(database):
    """Database session for integration tests."""
    async with database.get_session() as session:
        yield session


@pytest.fixture
def app(settings, database):
    """Application wired to the test database."""
    return create_app(settings, database=database)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# Test execution configuration
def pytest_collection_modifyitems(config, items):
    """Mark every test with its layer (unit / integration / api) by directory.

    Lets a layer run on its own, e.g. ``pytest -m unit``.
    """
    for item in items:
        for layer in ("unit", "integration", "api"):
            if item.nodeid.startswith(f"tests/{layer}/"):
                item.add_marker(getattr(pytest.mark, layer))
