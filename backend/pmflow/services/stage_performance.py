"""Performance Stage — warns when a request runs longer than the slow threshold."""

import logging
import time
from typing import Callable

from pmflow.core.result import Result
from pmflow.services.pipeline_executor import Next
from pmflow.services.request_scope import RequestScope

logger = logging.getLogger(__name__)


class PerformanceStage:
    def __init__(
        self, threshold_ms: int, clock: Callable[[], float] = time.perf_counter,
    ):
        self._threshold_ms = threshold_ms
        self._clock = clock

    async def __call__(self, scope: RequestScope, call_next: Next) -> Result:
        started = self._clock()
        try:
            return await call_next()
        finally:
            elapsed_ms = (self._clock() - started) * 1000
            if elapsed_ms > self._threshold_ms:
                logger.warning(
                    f"Slow request {scope.request_type}: {elapsed_ms:.0f}ms "
                    f"(threshold {self._threshold_ms}ms)",
                    extra=scope.log_extra(elapsed_ms=round(elapsed_ms, 2)),
                )
