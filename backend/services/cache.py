"""Content-addressed result cache.

Both pipelines receive a ``CacheBackend`` through their constructor. The
in-process backend is the default; a Redis backend is used when
``settings.redis_url`` is set.
"""

import hashlib
import logging
import time
from typing import Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def content_hash(*parts: str | None) -> str:
    """sha256 over the parts joined with '|'. None counts as empty."""
    joined = "|".join(p or "" for p in parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


class CacheBackend(Protocol):
    async def get(self, key: str) -> str | None:
        """Return the stored value or None if missing or expired."""

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key for ttl_seconds."""


class InMemoryCache:
    """Dict-backed cache. One instance per process.

    Expired entries are dropped when read, and swept on write once the map
    holds more than ``max_entries``. If every entry is still live the oldest
    writes are evicted.
    """

    def __init__(self, max_entries: int = 1000, clock=time.monotonic):
        self._entries: dict[str, tuple[str, float]] = {}
        self._max_entries = max_entries
        self._clock = clock

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (value, self._clock() + ttl_seconds)
        if len(self._entries) > self._max_entries:
            self._sweep()

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        overflow = len(self._entries) - self._max_entries
        for key in list(self._entries)[:max(overflow, 0)]:
            del self._entries[key]
        logger.debug("Cache sweep removed %d expired entries", len(expired))

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """Redis-backed cache.

    When Redis cannot be reached, reads and writes go to an in-process
    ``InMemoryCache`` with the same TTL contract.
    """

    def __init__(self, redis_url: str, prefix: str = "resumecraft:", fallback: InMemoryCache | None = None):
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._prefix = prefix
        self.fallback = fallback if fallback is not None else InMemoryCache()

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(self._prefix + key)
        except RedisError as e:
            logger.warning("Redis get failed for %s, using in-memory cache: %s", key[:8], e)
            return await self.fallback.get(key)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.setex(self._prefix + key, ttl_seconds, value)
        except RedisError as e:
            logger.warning("Redis set failed for %s, using in-memory cache: %s", key[:8], e)
            await self.fallback.set_with_ttl(key, value, ttl_seconds)


def build_cache(redis_url: str, max_entries: int = 1000) -> CacheBackend:
    if redis_url:
        logger.info("Using Redis cache at %s", redis_url)
        return RedisCache(redis_url, fallback=InMemoryCache(max_entries=max_entries))
    return InMemoryCache(max_entries=max_entries)
