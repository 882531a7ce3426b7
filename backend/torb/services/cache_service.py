"""
Redis caching service for the public event listing.

CACHING STRATEGY
================

What we cache:
  - The sanitized public event list served by GET /api/events
    (per-rank totals, remains and prices, no sheet detail)
  - Cache key: "events:list:public"

Why:
  - The listing is the landing page of every visitor and is identical for
    all of them (no per-user "mine" flags at this level)
  - Computing it aggregates reservations for every public event

Invalidation strategy:
  - Any reservation or cancellation changes remains -> delete the key
  - Event creation or edit changes the set of public events -> delete the key
  - Short TTL as safety net (REDIS_CACHE_TTL)

The single-event view is never cached: it carries per-user flags and must
reflect reservations immediately.

Redis is advisory. If it is disabled or unreachable every call degrades to
a cache miss and errors are logged, never raised.
"""

import json
from typing import Optional

import redis.asyncio as redis
from torb.core.config import get_settings
from torb.core.metrics import record_cache_operation
from torb.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_KEY = "events:list:public"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def get_cached_events() -> Optional[list[dict]]:
    """Retrieve the cached public event list."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(EVENT_LIST_KEY)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=EVENT_LIST_KEY)
            return json.loads(data)
        logger.debug("cache_miss", key=EVENT_LIST_KEY)
    except Exception as e:
        logger.error("cache_get_error", key=EVENT_LIST_KEY, error=str(e))

    return None


async def set_cached_events(data: list[dict]) -> None:
    """Cache the public event list with TTL."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(EVENT_LIST_KEY, settings.REDIS_CACHE_TTL, json.dumps(data))
        logger.debug("cache_set", key=EVENT_LIST_KEY, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=EVENT_LIST_KEY, error=str(e))


async def invalidate_event_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = await client.delete(EVENT_LIST_KEY)
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
