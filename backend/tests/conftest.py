"""
Pytest fixtures for test database, client, and seeded events.

Each test gets a fresh SQLite file database. Sessions are handed out per
request / per reservation so concurrent bookings run on separate
connections, the same way they do behind a real server.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./devevent_unused.db"
os.environ["REDIS_ENABLED"] = "false"
os.environ["NOTIFIER_BACKEND"] = "log"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from devevent.main import app
from devevent.db.base import Base
from devevent.db.session import build_engine, build_session_factory, get_db
from devevent.models.event import Event
from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage
from devevent.services.interfaces.notifier import Notifier


class RecordingNotifier(Notifier):
    """Collects messages instead of delivering them."""

    def __init__(self):
        self.confirmed: list[BookingConfirmedMessage] = []
        self.cancelled: list[BookingCancelledMessage] = []

    async def booking_confirmed(self, message: BookingConfirmedMessage) -> None:
        self.confirmed.append(message)

    async def booking_cancelled(self, message: BookingCancelledMessage) -> None:
        self.cancelled.append(message)


class FailingNotifier(Notifier):
    async def booking_confirmed(self, message: BookingConfirmedMessage) -> None:
        raise RuntimeError("mailer is down")

    async def booking_cancelled(self, message: BookingCancelledMessage) -> None:
        raise RuntimeError("mailer is down")


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create tables in a throwaway database file, dispose after the test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'devevent_test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def attendee_headers():
    def _headers(email: str) -> dict:
        return {"X-Attendee-Email": email}
    return _headers


async def _create_event(
    session_factory: async_sessionmaker[AsyncSession],
    title: str,
    capacity: Optional[int],
    days_ahead: int = 30,
) -> Event:
    event = Event(
        title=title,
        slug=title.lower().replace(" ", "-"),
        description="A test event",
        date=datetime.now(timezone.utc) + timedelta(days=days_ahead),
        location="Test Venue",
        capacity=capacity,
    )
    # Short-lived session: SQLite holds its write lock until a transaction ends
    async with session_factory() as session:
        session.add(event)
        await session.commit()
    return event


@pytest_asyncio.fixture
async def test_event(session_factory) -> Event:
    """Event with 100 spots."""
    return await _create_event(session_factory, "PyCon Meetup", capacity=100)


@pytest_asyncio.fixture
async def single_spot_event(session_factory) -> Event:
    """Event with exactly one spot."""
    return await _create_event(session_factory, "Rust Workshop", capacity=1)


@pytest_asyncio.fixture
async def unlimited_event(session_factory) -> Event:
    """Event without a capacity limit."""
    return await _create_event(session_factory, "Open Source Hack Night", capacity=None)


@pytest_asyncio.fixture
async def past_event(session_factory) -> Event:
    return await _create_event(session_factory, "Last Year Summit", capacity=50, days_ahead=-365)


@pytest.fixture
def create_event(session_factory):
    async def _factory(title: str, capacity: Optional[int]) -> Event:
        return await _create_event(session_factory, title, capacity)
    return _factory
