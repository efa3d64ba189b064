"""
Shared async Redis connection for the listing cache and notification fan-out.

Redis is optional. When a connect attempt fails, callers get None and no new
attempt is made for REDIS_RETRY_INTERVAL seconds, so an unreachable server
costs one connect timeout per interval instead of one per booking.
"""

import time
from typing import Optional

import redis.asyncio as redis
from devevent.core.config import get_settings
from devevent.core.logging import get_logger
from devevent.core.metrics import redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None
_retry_after: float = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or unreachable."""
    global _redis_client, _retry_after

    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client
    if time.monotonic() < _retry_after:
        return None

    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
    )
    try:
        await client.ping()
    except redis.RedisError as e:
        _retry_after = time.monotonic() + settings.REDIS_RETRY_INTERVAL
        redis_connection_errors.inc()
        logger.error("redis_connection_failed", error=str(e), retry_in=settings.REDIS_RETRY_INTERVAL)
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client, _retry_after
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
    _retry_after = 0.0
