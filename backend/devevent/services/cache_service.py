"""
Listing cache for the event catalog, backed by Redis.

Only paginated event listings are cached, under keys shaped like
"events:list:page=2&size=20&upcoming=True", for REDIS_CACHE_TTL seconds.

Booked and available counts are never cached. Capacity snapshots and the
reservation path always count confirmed bookings in the database.

Every committed reservation or cancellation drops all listing keys, so the
TTL only matters when an invalidation is lost (Redis briefly down).

All helpers are best effort. A Redis failure is logged, counted, and the
caller carries on as if the cache were empty.
"""

import json
from typing import Optional

from redis.exceptions import RedisError

from devevent.core.config import get_settings
from devevent.core.logging import get_logger
from devevent.core.metrics import record_cache_operation
from devevent.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"
INVALIDATION_BATCH = 100


def event_list_key(page: int, page_size: int, upcoming_only: bool) -> str:
    return f"{EVENT_LIST_PREFIX}page={page}&size={page_size}&upcoming={upcoming_only}"


async def get_cached_events(page: int, page_size: int, upcoming_only: bool) -> Optional[dict]:
    """Cached listing response, or None on a miss or when Redis is unavailable."""
    redis = await get_redis()
    if redis is None:
        return None

    key = event_list_key(page, page_size, upcoming_only)
    try:
        raw = await redis.get(key)
    except RedisError as exc:
        record_cache_operation("get", "error")
        logger.warning("listing_cache_read_failed", key=key, error=str(exc))
        return None

    record_cache_operation("get", "hit" if raw is not None else "miss")
    if raw is None:
        return None
    return json.loads(raw)


async def set_cached_events(page: int, page_size: int, upcoming_only: bool, data: dict) -> None:
    redis = await get_redis()
    if redis is None:
        return

    key = event_list_key(page, page_size, upcoming_only)
    try:
        await redis.set(key, json.dumps(data, default=str), ex=settings.REDIS_CACHE_TTL)
    except RedisError as exc:
        record_cache_operation("set", "error")
        logger.warning("listing_cache_write_failed", key=key, error=str(exc))
        return
    record_cache_operation("set", "ok")


async def invalidate_event_cache() -> int:
    """
    Drop every cached listing. Returns the number of keys removed.
    Keys are collected with SCAN and unlinked in batches.
    """
    redis = await get_redis()
    if redis is None:
        return 0

    removed = 0
    batch: list = []
    try:
        async for key in redis.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=INVALIDATION_BATCH):
            batch.append(key)
            if len(batch) >= INVALIDATION_BATCH:
                removed += await redis.unlink(*batch)
                batch.clear()
        if batch:
            removed += await redis.unlink(*batch)
    except RedisError as exc:
        record_cache_operation("invalidate", "error")
        logger.warning("listing_cache_invalidation_failed", removed=removed, error=str(exc))
        return removed

    record_cache_operation("invalidate", "ok")
    logger.debug("listing_cache_invalidated", removed=removed)
    return removed


async def get_cache_stats() -> dict:
    """Keyspace hit/miss counters for the health endpoint."""
    redis = await get_redis()
    if redis is None:
        return {"status": "disabled"}

    try:
        stats = await redis.info("stats")
    except RedisError as exc:
        return {"status": "error", "error": str(exc)}

    hits = stats.get("keyspace_hits", 0)
    misses = stats.get("keyspace_misses", 0)
    lookups = hits + misses
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(100 * hits / lookups, 2) if lookups else 0.0,
    }
