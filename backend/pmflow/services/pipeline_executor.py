"""Pipeline Executor — composes the ordered stage tuple around a terminal handler.

Invariants:
    - Stage order is fixed at construction and never changes
    - Stage i runs before stage i+1 and sees its result (or exception) afterwards
    - The terminal handler runs at most once per execute(), after every stage has
      passed control inward, and only if the request has not been cancelled

Design Decisions:
    - Stages are plain async callables (scope, call_next) -> Result: no base class,
      the Protocol documents the shape (ADR: Protocol over ABC)
    - Recursion over a pre-built closure chain: the chain is per request anyway,
      and the recursion reads as the invariant it implements
"""

from typing import Awaitable, Callable, Protocol, Sequence

from pmflow.core.result import Result
from pmflow.services.request_scope import RequestScope

Next = Callable[[], Awaitable[Result]]


class PipelineStage(Protocol):
    async def __call__(self, scope: RequestScope, call_next: Next) -> Result: ...


class PipelineExecutor:
    """Runs one request through the stage chain and its handler."""

    def __init__(self, stages: Sequence[PipelineStage]):
        self._stages: tuple[PipelineStage, ...] = tuple(stages)

    @property
    def stages(self) -> tuple[PipelineStage, ...]:
        return self._stages

    async def execute(self, scope: RequestScope, handler: Next) -> Result:
        async def invoke(index: int) -> Result:
            if index == len(self._stages):
                scope.check_cancelled()
                return await handler()
            return await self._stages[index](scope, lambda: invoke(index + 1))

        return await invoke(0)
