"""
Natours Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches the database gets its own in-memory SQLite
       engine (aiosqlite + StaticPool), with the schema created from the ORM
       metadata. The app's get_db_session dependency is overridden to use it.

Fixture Hierarchy:
    test_settings     immutable Settings for a development-mode app
    mock_db_session   AsyncMock session for pure unit tests
    db_engine         fresh in-memory database with all tables
    session_factory   async_sessionmaker bound to db_engine
    app               create_app(test_settings) wired to session_factory
    test_client       httpx AsyncClient over ASGITransport
    make_user         coroutine: insert a user with a role, return (user, token)
    auth_headers      coroutine: Authorization header for a new user of a role
    tour_body         factory for valid tour request bodies
    create_tour       coroutine: create a tour as an admin, return it
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["JWT_EXPIRES_IN"] = "1h"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import Base, build_engine, get_db_session  # noqa: E402
from app.models import review, tour, user  # noqa: E402,F401
from app.repositories.user_repository import UserRepository  # noqa: E402
from app.services.token_service import TokenService  # noqa: E402

TEST_PASSWORD = "pass1234"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "jwt_secret": "test-secret-not-for-production",
        "jwt_expires_in": "1h",
        "environment": "development",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


def tour_payload(**overrides) -> Dict:
    """A valid POST /api/v1/tours body (camelCase, as a client sends it)."""
    body = {
        "name": "The Forest Hiker",
        "duration": 5,
        "maxGroupSize": 25,
        "difficulty": "easy",
        "ratingsAverage": 4.7,
        "ratingsQuantity": 37,
        "price": 397,
        "summary": "  Breathtaking hike through the Canadian Banff National Park  ",
        "description": "Ut enim ad minim veniam.",
        "imageCover": "tour-1-cover.jpg",
        "images": ["tour-1-1.jpg", "tour-1-2.jpg"],
        "startDates": ["2021-04-25T09:00:00Z", "2021-07-20T09:00:00Z"],
        "startLocation": {
            "type": "Point",
            "coordinates": [-115.570154, 51.178456],
            "address": "224 Banff Ave, Banff, AB, Canada",
            "description": "Banff, CAN",
        },
    }
    body.update(overrides)
    return body


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_missing_user(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """A private in-memory database with every table created."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def app(test_settings, session_factory):
    """A development-mode app whose sessions come from the per-test database."""
    from app.main import create_app

    application = create_app(test_settings)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(session_factory, test_settings):
    """
    Insert a user directly through the repository and sign a token for it.

    Usage:
        admin, token = await make_user("admin")
    """
    tokens = TokenService.from_settings(test_settings)

    async def _make(role: str = "user", email: str = None, name: str = "Test User"):
        async with session_factory() as session:
            created = await UserRepository(session).create(
                name=name,
                email=email or f"{role}-{uuid4().hex[:8]}@natours.io",
                password=TEST_PASSWORD,
                role=role,
            )
            await session.commit()
        return created, await tokens.sign(created.id)

    return _make


@pytest.fixture
def auth_headers(make_user):
    """
    Usage:
        headers = await auth_headers("admin")
    """

    async def _headers(role: str = "user") -> Dict[str, str]:
        _, token = await make_user(role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def tour_body():
    """The tour_payload() factory, for tests that build request bodies."""
    return tour_payload


@pytest.fixture
def create_tour(test_client, auth_headers):
    """
    POST a tour as a freshly created admin and return the response's tour.

    Usage:
        tour = await create_tour(name="The Sea Explorer", price=497)
    """

    async def _create(**overrides) -> Dict:
        response = await test_client.post(
            "/api/v1/tours",
            json=tour_payload(**overrides),
            headers=await auth_headers("admin"),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]["tour"]

    return _create
