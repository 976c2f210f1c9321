"""
Redis caching service for public event pages.

CACHING STRATEGY
================

What we cache:
  - The public payload of an event, looked up by slug
  - Cache key pattern: "events:slug:{slug}"

Why:
  - Public event pages are the only anonymous, shareable, high-fanout read
  - A shared link can bring a burst of visitors for a single slug

Invalidation strategy:
  - On event update: delete the old and the new slug key (the slug may change)
  - On event delete: delete the slug key
  - TTL-based expiry as safety net (5 minutes)

Guest lists and ticket scans are never cached: check-in state must be read
fresh from the store.

Redis is optional. When disabled or unreachable every helper degrades to a
no-op and callers fall through to the database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from evntos.core.config import get_settings
from evntos.core.logging import get_logger
from evntos.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

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


def _make_slug_key(slug: str) -> str:
    return f"events:slug:{slug}"


async def get_cached_public_event(slug: str) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_slug_key(slug)
    try:
        data = await client.get(key)
        if data:
            record_cache_operation("get", hit=True)
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        record_cache_operation("get", hit=False)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_public_event(slug: str, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_slug_key(slug)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_public_event(*slugs: str) -> None:
    client = await get_redis()
    if not client:
        return

    keys = [_make_slug_key(s) for s in slugs if s]
    if not keys:
        return
    try:
        deleted = await client.delete(*keys)
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
        keyspace = await client.info("keyspace")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
            "keys": keyspace,
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
