"""
Tests for the shared Redis connection when the server is unreachable.
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from devevent.infrastructure import redis_client
from devevent.services.booking_service import reserve


class UnreachableRedis:
    pings = 0

    async def ping(self):
        UnreachableRedis.pings += 1
        raise RedisConnectionError("connect timed out")

    async def aclose(self):
        pass


@pytest.fixture
def unreachable_redis(monkeypatch):
    UnreachableRedis.pings = 0
    monkeypatch.setattr(redis_client.settings, "REDIS_ENABLED", True)
    monkeypatch.setattr(redis_client, "_redis_client", None)
    monkeypatch.setattr(redis_client, "_retry_after", 0.0)
    monkeypatch.setattr(redis_client.redis, "from_url", lambda *args, **kwargs: UnreachableRedis())
    return UnreachableRedis


@pytest.mark.asyncio
async def test_failed_connect_is_not_retried_immediately(unreachable_redis):
    assert await redis_client.get_redis() is None
    assert await redis_client.get_redis() is None
    assert unreachable_redis.pings == 1


@pytest.mark.asyncio
async def test_reconnects_after_retry_interval(unreachable_redis, monkeypatch):
    assert await redis_client.get_redis() is None

    monkeypatch.setattr(redis_client, "_retry_after", 0.0)
    assert await redis_client.get_redis() is None
    assert unreachable_redis.pings == 2


@pytest.mark.asyncio
async def test_bookings_do_not_wait_on_unreachable_redis(session_factory, test_event, notifier, unreachable_redis):
    for email in ("ada@example.com", "grace@example.com", "linus@example.com"):
        async with session_factory() as db:
            result = await reserve(db, test_event.id, email, "Attendee", notifier=notifier)
        assert result.ok

    # Only the first booking's cache invalidation tried to connect
    assert unreachable_redis.pings == 1
    assert len(notifier.confirmed) == 3
