"""
NoteHub Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches the database gets its own SQLite file under
       pytest's tmp_path (via aiosqlite), so no server database is needed
       and tests never share rows.

Fixture Hierarchy (all function-scoped):
    ├── settings:         Settings pointing at a temp SQLite file
    ├── app:              FastAPI app from create_app(settings), tables created
    ├── db_session:       AsyncSession bound to the app's engine
    ├── test_client:      HTTPX AsyncClient talking to the app in-process
    ├── mock_db_session:  AsyncMock session for error-path unit tests
    └── sample_poem:      A valid poem YAML written to settings.poem_path
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notehub.config import Settings
from notehub.database import create_tables, dispose_engine
from notehub.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notehub_test.db'}",
        poem_path=str(tmp_path / "poem.yaml"),
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    """
    A fully wired application with the notes table created.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    application = create_app(settings)
    await create_tables(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/healthcheck")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession (no real DB needed).

    Usage:
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        await store.delete_note(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_poem(settings):
    with open(settings.poem_path, "w", encoding="utf-8") as f:
        f.write("title: Fog\ntext: |\n  The fog comes\n  on little cat feet.\n")
    return settings.poem_path
