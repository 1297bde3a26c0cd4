"""Boundary Protocols — contracts between the pipeline core and its collaborators.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure (or test fakes) via dependency injection
    - UnitOfWork.begin() inside an open scope fails fast with TransactionAlreadyActiveError
    - CacheService.remove / remove_by_pattern on absent keys are no-ops, never errors

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO
    - Repository filters are equality-only keyword arguments: enough for every handler,
      and trivially implementable by an in-memory fake; query() exposes the full
      SQLAlchemy select for callers that need more
"""

from typing import Any, Protocol, Sequence, TypeVar
from uuid import UUID

T = TypeVar("T")


class Repository(Protocol[T]):
    """Per-aggregate persistence contract — bound to one unit of work."""
    async def get_by_id(self, entity_id: UUID) -> T | None: ...
    async def add(self, entity: T) -> T: ...
    async def update(self, entity: T) -> T: ...
    async def remove(self, entity: T) -> None: ...
    def query(self) -> Any: ...
    async def find(self, **filters: object) -> list[T]: ...
    async def find_one(self, **filters: object) -> T | None: ...
    async def count(self, **filters: object) -> int: ...
    async def list_page(
        self,
        page: int,
        page_size: int,
        order_by: str = "created_at",
        descending: bool = True,
        **filters: object,
    ) -> tuple[Sequence[T], int]: ...


class UnitOfWork(Protocol):
    """Transaction boundary over the relational store — one per request."""
    @property
    def in_transaction(self) -> bool: ...
    async def begin(self) -> None: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def save_changes(self) -> int: ...
    def repository(self, model: type[T]) -> Repository[T]: ...


class CacheService(Protocol):
    """Key/value cache with TTL and glob-pattern bulk eviction — shared across requests."""
    async def get(self, key: str) -> bytes | None: ...
    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None: ...
    async def remove(self, key: str) -> None: ...
    async def remove_by_pattern(self, pattern: str) -> int: ...
    async def ping(self) -> bool: ...
