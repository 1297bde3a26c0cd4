"""Cache backends — in-process TTL/pattern semantics and Redis error mapping."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from pmflow.config import Settings
from pmflow.core.errors import CacheError
from pmflow.infrastructure.cache import (
    InMemoryCacheService, RedisCacheService, build_cache,
)


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def test_memory_entries_expire():
    clock = _Clock()
    cache = InMemoryCacheService(clock=clock)
    await cache.set("k", b"v", 10)
    clock.now = 9.9
    assert await cache.get("k") == b"v"
    clock.now = 10.0
    assert await cache.get("k") is None


async def test_memory_pattern_removal():
    cache = InMemoryCacheService()
    await cache.set("projects:list:page1:size10:all", b"1", 60)
    await cache.set("projects:list:page2:size10:all", b"2", 60)
    await cache.set("projects:abc", b"3", 60)
    assert await cache.remove_by_pattern("projects:list:*") == 2
    assert cache.keys() == ["projects:abc"]
    assert await cache.remove_by_pattern("tasks:*") == 0
    await cache.remove("missing")


def _redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=b"v")
    client.set = AsyncMock()
    client.unlink = AsyncMock(side_effect=lambda *keys: len(keys))
    client.ping = AsyncMock(return_value=True)
    return client


async def test_redis_keys_are_prefixed():
    client = _redis_client()
    cache = RedisCacheService(client, prefix="pmflow")
    await cache.set("projects:1", b"x", 300)
    client.set.assert_awaited_once_with("pmflow:projects:1", b"x", ex=300)
    assert await cache.get("projects:1") == b"v"
    client.get.assert_awaited_once_with("pmflow:projects:1")


async def test_redis_pattern_removal_scans_and_unlinks():
    client = _redis_client()
    seen = {}

    async def scan_iter(match, count):
        seen["match"] = match
        for key in (b"pmflow:projects:list:a", b"pmflow:projects:list:b"):
            yield key

    client.scan_iter = scan_iter
    cache = RedisCacheService(client, prefix="pmflow")
    assert await cache.remove_by_pattern("projects:list:*") == 2
    assert seen["match"] == "pmflow:projects:list:*"
    client.unlink.assert_awaited_once_with(b"pmflow:projects:list:a", b"pmflow:projects:list:b")


async def test_redis_errors_become_cache_errors():
    client = _redis_client()
    client.get = AsyncMock(side_effect=RedisConnectionError("down"))
    cache = RedisCacheService(client)
    with pytest.raises(CacheError) as excinfo:
        await cache.get("k")
    assert excinfo.value.operation == "get"


async def test_redis_ping_failure_reports_unhealthy():
    client = _redis_client()
    client.ping = AsyncMock(side_effect=RedisConnectionError("down"))
    assert await RedisCacheService(client).ping() is False


def test_build_cache_honours_backend_setting():
    assert isinstance(build_cache(Settings(cache_backend="memory")), InMemoryCacheService)
