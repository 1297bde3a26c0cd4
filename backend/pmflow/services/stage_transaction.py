"""Transaction Stage — exactly one unit-of-work transaction per command.

Invariants:
    - Queries never open a transaction
    - Commands: begin, run inner chain, commit on Success
    - Failure result: rollback, return the Failure (no partial writes persist)
    - Any exception, cancellation included: rollback, re-raise unchanged; a
      rollback that itself fails is logged and never replaces the original fault
    - A rollback failing after a Failure result is the fault that propagates
    - A cancellation token set before commit aborts the command (rollback)
    - Once started, a commit is never abandoned halfway: it is shielded, and
      scope.committed records the outcome before cancellation propagates

Design Decisions:
    - Innermost stage: validation failures short-circuit before a transaction
      opens, and eviction (outer) sees the committed outcome
    - BaseException in the rollback path: asyncio.CancelledError is not an
      Exception subclass and must still roll back
"""

import asyncio
import logging

from pmflow.core.domain_types import RequestKind
from pmflow.core.result import Result
from pmflow.services.pipeline_executor import Next
from pmflow.services.request_scope import RequestScope

logger = logging.getLogger(__name__)


class TransactionStage:
    async def __call__(self, scope: RequestScope, call_next: Next) -> Result:
        if scope.registration.kind is RequestKind.QUERY:
            return await call_next()

        uow = scope.uow
        await uow.begin()
        try:
            result = await call_next()
            if result.is_success:
                scope.check_cancelled()
        except BaseException:
            logger.debug(
                f"Rolling back {scope.request_type} after exception",
                extra=scope.log_extra(outcome="rollback"),
            )
            await self._rollback_quietly(scope)
            raise

        if not result.is_success:
            logger.debug(
                f"Rolling back {scope.request_type}: {result.reason}",
                extra=scope.log_extra(outcome="rollback"),
            )
            try:
                await uow.rollback()
            except Exception:
                logger.error(
                    f"Rollback failed for {scope.request_type} after a failure result",
                    exc_info=True, extra=scope.log_extra(outcome="rollback_failed"),
                )
                raise
            return result

        await self._commit(scope)
        return result

    async def _rollback_quietly(self, scope: RequestScope) -> None:
        """Roll back without replacing the fault already propagating."""
        try:
            await scope.uow.rollback()
        except Exception:
            logger.error(
                f"Rollback failed for {scope.request_type}; re-raising the original fault",
                exc_info=True, extra=scope.log_extra(outcome="rollback_failed"),
            )

    async def _commit(self, scope: RequestScope) -> None:
        commit = asyncio.ensure_future(scope.uow.commit())
        try:
            await asyncio.shield(commit)
        except asyncio.CancelledError:
            # the commit keeps running; record its outcome before unwinding
            await commit
            scope.mark_committed()
            raise
        scope.mark_committed()
