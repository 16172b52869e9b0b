from __future__ import annotations
import hashlib
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import msgpack
import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def filter_fingerprint(params: Optional[Dict[str, Any]] = None) -> str:
    """Stable short hash of a query map; key order and key case do not matter."""
    normalized = sorted((str(k).lower(), str(v)) for k, v in (params or {}).items())
    return hashlib.md5(json.dumps(normalized).encode()).hexdigest()[:12]


class RedisCache:
    """
    Read-through cache for unwrapped entity records.

    Key schema:
        omnirest:cache:{connector_id}:{entity}:{md5(sorted_params)}

    Value: MessagePack-serialized dict:
        {"data": List[Dict], "fetched_at": float}

    TTL is set via native Redis EXPIRE (per connector freshness_ttl_ms).
    Only successful reads are cached; a swallowed failure is never stored.
    """

    KEY_PREFIX = "omnirest:cache"

    def __init__(self, redis_client: aioredis.Redis) -> None:
        self._redis = redis_client

    def _build_key(
        self,
        connector_id: str,
        entity_name: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> str:
        return (
            f"{self.KEY_PREFIX}:{connector_id}:{entity_name.lower()}:"
            f"{filter_fingerprint(params)}"
        )

    async def get(
        self,
        connector_id: str,
        entity_name: str,
        max_staleness_ms: int,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Tuple[List[Dict], int]]:
        """
        Return (records, age_ms) when a cached entry is within max_staleness_ms.
        max_staleness_ms == 0 means "live only" and always misses.
        """
        if max_staleness_ms <= 0:
            return None

        key = self._build_key(connector_id, entity_name, params)
        raw = await self._redis.get(key)
        if raw is None:
            return None

        try:
            entry = msgpack.unpackb(raw, raw=False)
        except Exception as exc:
            logger.warning("Cache deserialization failed for %s: %s", key, exc)
            return None

        age_ms = int((time.time() - entry["fetched_at"]) * 1000)
        if age_ms > max_staleness_ms:
            return None

        logger.debug("Cache HIT %s (age=%dms)", key, age_ms)
        return entry["data"], age_ms

    async def put(
        self,
        connector_id: str,
        entity_name: str,
        data: List[Dict],
        ttl_ms: int,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        key = self._build_key(connector_id, entity_name, params)
        payload = {"data": data, "fetched_at": time.time()}
        ttl_seconds = max(1, ttl_ms // 1000)
        try:
            # msgpack integers are limited to 64 bits; wider ids stay uncached.
            packed = msgpack.packb(payload, use_bin_type=True)
        except (OverflowError, TypeError, ValueError) as exc:
            logger.warning("Cache serialization failed for %s: %s", key, exc)
            return
        try:
            await self._redis.set(key, packed, ex=ttl_seconds)
        except RedisError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return
        logger.debug("Cache PUT %s (ttl=%ds, rows=%d)", key, ttl_seconds, len(data))

    async def invalidate(self, connector_id: str, entity_name: str) -> int:
        """Drop every cached page of one entity. Uses SCAN, never KEYS."""
        pattern = f"{self.KEY_PREFIX}:{connector_id}:{entity_name.lower()}:*"
        removed = 0
        async for key in self._redis.scan_iter(match=pattern, count=100):
            removed += await self._redis.delete(key)
        return removed

    async def get_stats(self, connector_id: str) -> Dict[str, Any]:
        pattern = f"{self.KEY_PREFIX}:{connector_id}:*"
        count = 0
        async for _ in self._redis.scan_iter(match=pattern, count=100):
            count += 1
        return {"connector_id": connector_id, "cached_entries": count}

    async def ping(self) -> bool:
        """Health check: True if Redis is reachable."""
        try:
            return await self._redis.ping()
        except Exception:
            return False


class NullCache:
    """No-op cache used when Redis is unavailable (local dev, tests)."""

    async def get(self, *a, **kw):
        return None

    async def put(self, *a, **kw):
        pass

    async def invalidate(self, *a, **kw):
        return 0

    async def get_stats(self, *a, **kw):
        return {"redis": "disabled"}

    async def ping(self):
        return False
