"""Request Dispatcher — the single entry point: execute(request) -> Result.

Invariants:
    - Registration is resolved before any stage runs; unregistered types fault
      without opening a unit of work
    - One unit of work per request, closed when the request finishes
    - The returned Result reflects completed persistence and cache effects
    - Business failures come back as Failure values; faults propagate
    - A request id passed in (or bound via bind()) becomes scope.request_id, so
      pipeline logs and fault contexts carry the caller's correlation id

Design Decisions:
    - uow_factory is an async context manager factory: production passes
      DatabaseSessionManager.unit_of_work, tests pass in-memory fakes
    - build_pipeline owns the stage order so it is written down exactly once
"""

import logging
from typing import AsyncContextManager, Callable

from pmflow.config import Settings
from pmflow.core.repository_protocols import CacheService, UnitOfWork
from pmflow.core.requests import CancellationToken, Request
from pmflow.core.result import Result
from pmflow.services.pipeline_executor import PipelineExecutor
from pmflow.services.request_registry import RequestRegistry
from pmflow.services.request_scope import RequestScope
from pmflow.services.stage_cache_invalidation import CacheInvalidationStage
from pmflow.services.stage_logging import LoggingStage
from pmflow.services.stage_performance import PerformanceStage
from pmflow.services.stage_transaction import TransactionStage
from pmflow.services.stage_validation import ValidationStage

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], AsyncContextManager[UnitOfWork]]


def build_pipeline(settings: Settings) -> PipelineExecutor:
    """Logging → Performance → Validation → CacheInvalidation → Transaction → handler."""
    return PipelineExecutor((
        LoggingStage(),
        PerformanceStage(settings.slow_request_threshold_ms),
        ValidationStage(),
        CacheInvalidationStage(settings.cache_invalidation_attempts),
        TransactionStage(),
    ))


class RequestDispatcher:
    def __init__(
        self,
        registry: RequestRegistry,
        executor: PipelineExecutor,
        uow_factory: UnitOfWorkFactory,
        cache: CacheService,
        request_id: str | None = None,
    ):
        self._registry = registry
        self._executor = executor
        self._uow_factory = uow_factory
        self._cache = cache
        self._request_id = request_id

    def bind(self, request_id: str) -> "RequestDispatcher":
        """Same registry and collaborators; every request it runs carries request_id."""
        return RequestDispatcher(
            self._registry, self._executor, self._uow_factory, self._cache, request_id,
        )

    async def execute(
        self,
        request: Request,
        cancellation: CancellationToken | None = None,
        request_id: str | None = None,
    ) -> Result:
        registration = self._registry.resolve(type(request))
        request_id = request_id or self._request_id
        async with self._uow_factory() as uow:
            scope = RequestScope(
                request=request,
                registration=registration,
                uow=uow,
                cache=self._cache,
                cancellation=cancellation or CancellationToken(),
            )
            if request_id:
                scope.request_id = request_id
            handler = registration.handler_factory(scope)
            return await self._executor.execute(scope, lambda: handler(request))
