"""Cache Services — Redis-backed and in-process implementations of CacheService.

Invariants:
    - Values are opaque bytes; serialization belongs to the caller
    - Every key written gets a TTL (no immortal entries)
    - remove / remove_by_pattern on absent keys are no-ops returning 0 / None
    - Redis failures surface as CacheError; callers decide whether to degrade or fault
    - Instance prefix ("pmflow:") applied on every Redis key so several apps can share a server

Design Decisions:
    - SCAN + UNLINK over KEYS + DEL for pattern eviction: never blocks the server on
      large keyspaces (ADR: eviction runs on the write path)
    - InMemoryCacheService uses fnmatchcase: same glob semantics as Redis MATCH for
      the key grammar we generate
    - Injectable clock on the in-memory service: TTL expiry is testable without sleeping
"""

import logging
import time
from fnmatch import fnmatchcase
from typing import Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from pmflow.config import Settings
from pmflow.core.errors import CacheError

logger = logging.getLogger(__name__)

_SCAN_BATCH = 500


class RedisCacheService:
    """CacheService over a shared redis.asyncio client."""

    def __init__(self, client: aioredis.Redis, prefix: str = "pmflow"):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "pmflow") -> "RedisCacheService":
        return cls(aioredis.from_url(url, decode_responses=False), prefix)

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(self._make_key(key))
        except RedisError as e:
            raise CacheError(str(e), "get") from e

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        try:
            await self._client.set(self._make_key(key), value, ex=ttl_seconds)
        except RedisError as e:
            raise CacheError(str(e), "set") from e

    async def remove(self, key: str) -> None:
        try:
            await self._client.unlink(self._make_key(key))
        except RedisError as e:
            raise CacheError(str(e), "remove") from e

    async def remove_by_pattern(self, pattern: str) -> int:
        removed = 0
        batch: list = []
        try:
            async for key in self._client.scan_iter(
                match=self._make_key(pattern), count=_SCAN_BATCH,
            ):
                batch.append(key)
                if len(batch) >= _SCAN_BATCH:
                    removed += await self._client.unlink(*batch)
                    batch.clear()
            if batch:
                removed += await self._client.unlink(*batch)
        except RedisError as e:
            raise CacheError(str(e), "remove_by_pattern") from e
        return removed

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryCacheService:
    """Process-local CacheService for single-instance runs and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}

    def _live(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def get(self, key: str) -> bytes | None:
        return self._live(key)

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    async def remove_by_pattern(self, pattern: str) -> int:
        matched = [k for k in self._entries if fnmatchcase(k, pattern)]
        for key in matched:
            del self._entries[key]
        return len(matched)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        """Live keys, for diagnostics and tests."""
        return [k for k in list(self._entries) if self._live(k) is not None]


def build_cache(settings: Settings) -> RedisCacheService | InMemoryCacheService:
    if settings.cache_backend == "memory":
        logger.info("Using in-memory cache backend")
        return InMemoryCacheService()
    logger.info("Using Redis cache backend")
    return RedisCacheService.from_url(settings.redis_url, settings.cache_key_prefix)
