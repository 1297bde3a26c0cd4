"""Logging Stage — outermost stage; one start line and one outcome line per request.

Invariants:
    - Every request logs exactly one outcome: success, failure, cancelled or fault
    - Faults are logged with traceback and re-raised unchanged
    - Never alters the Result
"""

import asyncio
import logging
import time
from typing import Callable

from pmflow.core.errors import PMFlowError, RequestCancelledError
from pmflow.core.result import Result
from pmflow.services.pipeline_executor import Next
from pmflow.services.request_scope import RequestScope

logger = logging.getLogger(__name__)


class LoggingStage:
    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock

    async def __call__(self, scope: RequestScope, call_next: Next) -> Result:
        logger.info(
            f"Handling {scope.request_type}",
            extra=scope.log_extra(outcome="started"),
        )
        started = self._clock()
        try:
            result = await call_next()
        except (asyncio.CancelledError, RequestCancelledError):
            logger.warning(
                f"{scope.request_type} cancelled",
                extra=scope.log_extra(
                    outcome="cancelled", elapsed_ms=self._elapsed(started),
                ),
            )
            raise
        except PMFlowError as e:
            logger.error(
                f"{scope.request_type} faulted: {e.message}",
                extra=scope.log_extra(
                    outcome="fault", error_code=e.code,
                    elapsed_ms=self._elapsed(started),
                ),
                exc_info=True,
            )
            raise
        except Exception as e:
            logger.error(
                f"{scope.request_type} faulted: {e}",
                extra=scope.log_extra(
                    outcome="fault", error_code=type(e).__name__,
                    elapsed_ms=self._elapsed(started),
                ),
                exc_info=True,
            )
            raise

        if result.is_success:
            logger.info(
                f"Handled {scope.request_type}",
                extra=scope.log_extra(
                    outcome="success", elapsed_ms=self._elapsed(started),
                ),
            )
        else:
            logger.info(
                f"{scope.request_type} failed: {result.reason}",
                extra=scope.log_extra(
                    outcome=f"failure:{result.kind.value}",
                    elapsed_ms=self._elapsed(started),
                ),
            )
        return result

    def _elapsed(self, started: float) -> float:
        return round((self._clock() - started) * 1000, 2)
