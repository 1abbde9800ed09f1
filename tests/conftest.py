"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database; it defaults to an in-memory
  SQLite database so the suite runs without a PostgreSQL server.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from rentops.auth.jwt import create_token_pair
from rentops.auth.passwords import hash_password
from rentops.database import Base, get_db
from rentops.main import app
from rentops.models.user import User

# ---------------------------------------------------------------------------
# Test database engine
# ---------------------------------------------------------------------------

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory DB.
        return create_async_engine(
            _test_db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)


def future(days: int) -> date:
    """A date ``days`` from today."""
    return date.today() + timedelta(days=days)


# ---------------------------------------------------------------------------
# Per-test engine with a fresh schema
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine and all tables, dropping them after the test."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: authenticated users
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, prefix: str, *, is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{prefix}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name="Test User",
        is_active=is_active,
        role="manager",
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create and return a test user directly in the DB."""
    return await _create_user(db_session, "testuser")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the test user."""
    tokens = create_token_pair(str(test_user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def other_auth_headers(db_session: AsyncSession) -> dict[str, str]:
    """Authorization headers for a second manager who owns nothing."""
    other = await _create_user(db_session, "otheruser")
    tokens = create_token_pair(str(other.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Convenience fixtures: properties
# ---------------------------------------------------------------------------


async def create_property(client: AsyncClient, headers: dict, **overrides) -> dict:
    """POST a property with sensible defaults and return the JSON body."""
    payload = {
        "name": "Test Apartment",
        "property_type": "apartment",
        "rental_type": "short_term",
        "daily_rate": 100.00,
        "address": "1 Test Street",
    }
    payload.update(overrides)
    response = await client.post("/api/v1/properties", json=payload, headers=headers)
    assert response.status_code == 201, f"Failed to create property: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, auth_headers: dict) -> dict:
    """A short-term property with a 100.00 daily rate."""
    return await create_property(client, auth_headers)


@pytest_asyncio.fixture
async def mixed_property(client: AsyncClient, auth_headers: dict) -> dict:
    """A property let both nightly and on leases."""
    return await create_property(
        client,
        auth_headers,
        name="Mixed House",
        property_type="house",
        rental_type="both",
        daily_rate=200.00,
        monthly_rent=3000.00,
    )
