"""Test configuration and fixtures."""

import os

# Must be set before airline.core.config builds its settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-bytes")

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from airline.core.cache import LookasideCache
from airline.core.database import Base, create_engine_for
from airline.core.dependencies import get_db
from airline.core.mapping import create_mapper
from airline.core.security import create_access_token, hash_password
from airline.models import *  # noqa: F403 - Import all models
from airline.models import Flight, User, UserRole
from airline.services.events import BookingEvents

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Manually advanced monotonic clock for expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_engine_for(TEST_DATABASE_URL)

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def cache():
    return LookasideCache(sliding_expiration=300)


@pytest.fixture
def mapper():
    return create_mapper()


@pytest.fixture
def booking_events():
    return BookingEvents()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, cache, mapper, booking_events):
    """Create the application wired to the test session and fixtures."""
    from airline.main import create_app

    app = create_app()
    app.state.cache = cache
    app.state.mapper = mapper
    app.state.booking_events = booking_events

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _create_user(session: AsyncSession, username: str, role: UserRole, password: str = "secret123") -> User:
    user = User(
        username=username,
        password=hash_password(password),
        role=role.value,
        email=f"{username}@airline.example",
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def _auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def manager(test_session):
    return await _create_user(test_session, "manager", UserRole.MANAGER)


@pytest_asyncio.fixture
async def traveller(test_session):
    return await _create_user(test_session, "traveller", UserRole.USER)


@pytest_asyncio.fixture
async def other_traveller(test_session):
    return await _create_user(test_session, "other_traveller", UserRole.USER)


@pytest.fixture
def manager_headers(manager):
    return _auth_headers(manager)


@pytest.fixture
def user_headers(traveller):
    return _auth_headers(traveller)


@pytest.fixture
def other_user_headers(other_traveller):
    return _auth_headers(other_traveller)


@pytest.fixture
def sample_flight_data():
    """Sample flight data for testing."""
    return {
        "flight_number": "FL001",
        "departure": "Lisbon",
        "destination": "London",
        "departure_time": "2030-06-01T08:00:00",
        "arrival_time": "2030-06-01T10:30:00",
        "price": 155.0,
    }


@pytest_asyncio.fixture
async def flight(test_session):
    """A stored flight, inserted directly so the cache is untouched."""
    departs = datetime(2030, 6, 1, 8, 0)
    entity = Flight(
        flight_number="FL001",
        departure="Lisbon",
        destination="London",
        departure_time=departs,
        arrival_time=departs + timedelta(hours=2, minutes=30),
        price=155.0,
    )
    test_session.add(entity)
    await test_session.commit()
    await test_session.refresh(entity)
    return entity
