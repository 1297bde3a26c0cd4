"""Cached Read — cache-aside lookup used by query handlers.

Invariants:
    - Hit: the cached JSON is decoded and returned; the store is not touched
    - Miss: load() runs, a non-None value is written back with the entry's TTL class
    - None results are never cached (a later create must be visible at once)
    - Cache faults on the read path degrade to a store read and are logged as warnings;
      a corrupt entry is treated as a miss and overwritten

Design Decisions:
    - pydantic TypeAdapter for the JSON codec: the DTO models are the cache format,
      so a schema change fails validation and falls back to the store
"""

import logging
from typing import Awaitable, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from pmflow.core.domain_types import CacheTTL
from pmflow.core.errors import CacheError
from pmflow.core.repository_protocols import CacheService

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def cached_read(
    cache: CacheService,
    key: str,
    ttl: CacheTTL,
    adapter: TypeAdapter[T],
    load: Callable[[], Awaitable[T | None]],
) -> T | None:
    try:
        raw = await cache.get(key)
    except CacheError as e:
        logger.warning(
            f"Cache read failed, falling back to store: {e.message}",
            extra={"cache_key": key, "error_code": e.code},
        )
        raw = None

    if raw is not None:
        try:
            return adapter.validate_json(raw)
        except ValidationError:
            logger.warning(
                "Discarding undecodable cache entry", extra={"cache_key": key},
            )

    value = await load()
    if value is None:
        return None

    try:
        await cache.set(key, adapter.dump_json(value), int(ttl))
    except CacheError as e:
        logger.warning(
            f"Cache write failed: {e.message}",
            extra={"cache_key": key, "error_code": e.code},
        )
    return value
