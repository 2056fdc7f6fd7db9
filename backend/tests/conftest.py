"""
SConf Backend - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite, foreign
       keys enabled) with the full schema, plus an app instance whose
       session factory points at it. ASGITransport does not run the
       lifespan, so the fixtures attach the session factory to app.state
       themselves.

Fixture Hierarchy (all function-scoped):
    engine ─┬─ session_factory ─┬─ db_session        (direct store/service tests)
            │                   └─ app ── test_client (HTTP tests)
    mock_db_session                                   (error-path unit tests)
    create_scientist / create_conference / create_participation
                                                      (POST helpers over test_client)
"""

import os

# Override settings for testing BEFORE any sconf imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_PREFIX"] = "/api"
os.environ["DEFAULT_PAGE_SIZE"] = "10"
os.environ["MAX_PAGE_SIZE"] = "100"

from typing import Any, AsyncGenerator, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from sconf.database import Base, create_db_engine, create_session_factory  # noqa: E402
import sconf.models  # noqa: E402,F401


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created; disposed after the test."""
    engine = create_db_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator:
    """A session for calling the store and services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_db_failure(mock_db_session):
            mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(engine, session_factory):
    from sconf.main import create_app

    application = create_app()
    application.state.engine = engine
    application.state.session_factory = session_factory
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Entity Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def create_scientist(test_client):
    """POST /api/scientists with sensible defaults; returns the created JSON."""
    counter = {"n": 0}

    async def _create(**overrides: Any) -> Dict[str, Any]:
        counter["n"] += 1
        payload = {
            "fullName": f"Scientist {counter['n']}",
            "country": "Germany",
            "degree": "PhD",
            "specialization": "Physics",
            "organization": "Max Planck",
        }
        payload.update(overrides)
        response = await test_client.post("/api/scientists", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_conference(test_client):
    counter = {"n": 0}

    async def _create(**overrides: Any) -> Dict[str, Any]:
        counter["n"] += 1
        payload = {
            "topic": "AI",
            "name": f"Conference {counter['n']}",
            "date": f"2030-01-{counter['n']:02d}T09:00:00Z",
            "country": "France",
            "location": "Paris",
            "capacity": 100,
        }
        payload.update(overrides)
        response = await test_client.post("/api/conferences", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_participation(test_client):
    async def _create(scientist_id: int, conference_id: int, **overrides: Any) -> Dict[str, Any]:
        payload = {
            "talkTitle": "Advances in AI",
            "participationType": "Keynote",
            "durationMinutes": 30,
            "scientistId": scientist_id,
            "conferenceId": conference_id,
        }
        payload.update(overrides)
        response = await test_client.post("/api/participations", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
