"""Request Scope — the per-request context threaded through stages and handlers.

Invariants:
    - One scope per dispatched request; never shared between requests
    - Holds the request's own unit of work and the process-wide cache handle
    - touched_keys is append-only and de-duplicated, in first-report order
    - committed flips once, after the unit of work has durably committed

Design Decisions:
    - Per-request state lives here, not on stages: stages are built once at startup
      and stay stateless (ADR: safe under concurrent asyncio tasks)
    - Handlers report keys they learn from loaded rows (mark_touched); the
      CacheInvalidation stage evicts those together with the type-based targets
"""

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pmflow.core.errors import ErrorContext, RequestCancelledError
from pmflow.core.repository_protocols import CacheService, UnitOfWork
from pmflow.core.requests import CancellationToken, Request

if TYPE_CHECKING:
    from pmflow.services.request_registry import Registration


def _new_request_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class RequestScope:
    request: Request
    registration: "Registration"
    uow: UnitOfWork
    cache: CacheService
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    request_id: str = field(default_factory=_new_request_id)
    touched_keys: list[str] = field(default_factory=list)
    committed: bool = False

    @property
    def request_type(self) -> str:
        return type(self.request).__name__

    def mark_touched(self, *keys: str) -> None:
        for key in keys:
            if key not in self.touched_keys:
                self.touched_keys.append(key)

    def mark_committed(self) -> None:
        self.committed = True

    def check_cancelled(self) -> None:
        """Raise RequestCancelledError if the caller has cancelled."""
        if self.cancellation.is_cancelled:
            raise RequestCancelledError(
                self.request_type,
                ErrorContext(request_type=self.request_type, request_id=self.request_id),
            )

    def log_extra(self, **fields: object) -> dict:
        return {
            "request_type": self.request_type,
            "request_id": self.request_id,
            **fields,
        }
