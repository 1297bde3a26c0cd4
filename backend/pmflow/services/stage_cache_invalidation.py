"""Cache Invalidation Stage — evicts stale cache entries after a command commits.

Invariants:
    - Queries pass straight through
    - Eviction happens only after the inner chain (Transaction included) returned
      Success, i.e. never before commit
    - Failure or fault from the inner chain evicts nothing
    - Targets = registered type-based targets, then keys reported by the handler,
      de-duplicated in that order
    - Eviction is retried up to `attempts` times; targets still failing after that
      raise CacheInvalidationError (stale data is never left silently)
    - Cancelled after commit: eviction still runs (shielded) before the
      cancellation propagates, because the store has already changed

Design Decisions:
    - Evict-on-write only, never repopulate: the next read rebuilds the entry from
      committed data (ADR: cache-aside)
    - Sits outside the Transaction stage so the commit has completed before any key
      is removed; a concurrent reader can then only repopulate from committed rows
"""

import asyncio
import logging

from pmflow.core import cache_keys
from pmflow.core.domain_types import RequestKind
from pmflow.core.errors import CacheError, CacheInvalidationError, ErrorContext
from pmflow.core.result import Result
from pmflow.services.pipeline_executor import Next
from pmflow.services.request_scope import RequestScope

logger = logging.getLogger(__name__)


class CacheInvalidationStage:
    def __init__(self, attempts: int = 3, backoff_seconds: float = 0.05):
        self._attempts = max(attempts, 1)
        self._backoff_seconds = backoff_seconds

    async def __call__(self, scope: RequestScope, call_next: Next) -> Result:
        if scope.registration.kind is RequestKind.QUERY:
            return await call_next()
        try:
            result = await call_next()
        except asyncio.CancelledError:
            if scope.committed:
                await asyncio.shield(self.evict(scope))
            raise
        if not result.is_success:
            return result
        await self.evict(scope)
        return result

    async def evict(self, scope: RequestScope) -> None:
        pending = self._targets(scope)
        for attempt in range(1, self._attempts + 1):
            failed: list[str] = []
            for target in pending:
                try:
                    await self._evict_one(scope, target)
                except CacheError as e:
                    logger.warning(
                        f"Cache eviction failed for {target}: {e.message}",
                        extra=scope.log_extra(
                            cache_key=target, attempt=attempt, error_code=e.code,
                        ),
                    )
                    failed.append(target)
            if not failed:
                return
            pending = failed
            if attempt < self._attempts and self._backoff_seconds:
                await asyncio.sleep(self._backoff_seconds * attempt)

        raise CacheInvalidationError(
            pending, self._attempts,
            ErrorContext(
                request_type=scope.request_type, request_id=scope.request_id,
                debug_info={"targets": pending},
            ),
        )

    def _targets(self, scope: RequestScope) -> list[str]:
        targets: list[str] = []
        for key in (*scope.registration.targets(scope.request), *scope.touched_keys):
            if key not in targets:
                targets.append(key)
        return targets

    async def _evict_one(self, scope: RequestScope, target: str) -> None:
        if cache_keys.is_pattern(target):
            removed = await scope.cache.remove_by_pattern(target)
        else:
            await scope.cache.remove(target)
            removed = None
        logger.debug(
            f"Evicted {target}" + (f" ({removed} keys)" if removed is not None else ""),
            extra=scope.log_extra(cache_key=target),
        )
