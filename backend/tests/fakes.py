"""In-memory stand-ins for the store and the cache, shared by pipeline and handler tests.

Invariants:
    - FakeStore holds committed rows only, as plain column dicts per model
    - A FakeUnitOfWork stages every change in its identity map; commit() copies the
      map into the store, rollback() discards it, so rolled-back writes never leak
    - Loaded rows are fresh ORM instances: mutating one changes nothing until commit
    - FlakyCache fails the first N calls of a chosen operation with CacheError

Design Decisions:
    - Column dicts over keeping ORM instances in the store: a handler mutating a
      loaded row must not alter committed state behind the unit of work's back
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from uuid import UUID

from sqlalchemy import inspect

from pmflow.core.errors import (
    CacheError, NoActiveTransactionError, TransactionAlreadyActiveError,
)
from pmflow.infrastructure.cache import InMemoryCacheService

_DELETED = object()


def _columns(model: type) -> list[str]:
    return [attr.key for attr in inspect(model).column_attrs]


def _raw(value: Any) -> Any:
    return getattr(value, "value", value)


class FakeStore:
    """Committed state plus counters the tests assert on."""

    def __init__(self) -> None:
        self.rows: dict[type, dict[UUID, dict[str, Any]]] = {}
        self.begins = 0
        self.commits = 0
        self.rollbacks = 0

    def table(self, model: type) -> dict[UUID, dict[str, Any]]:
        return self.rows.setdefault(model, {})

    def insert(self, entity: Any) -> Any:
        """Seed a committed row directly, bypassing any unit of work."""
        model = type(entity)
        self.table(model)[entity.id] = {c: getattr(entity, c) for c in _columns(model)}
        return entity

    def get(self, model: type, entity_id: UUID) -> dict[str, Any] | None:
        return self.table(model).get(entity_id)

    def count(self, model: type) -> int:
        return len(self.table(model))

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["FakeUnitOfWork"]:
        uow = FakeUnitOfWork(self)
        try:
            yield uow
        finally:
            if uow.in_transaction:
                await uow.rollback()


class FakeUnitOfWork:
    def __init__(self, store: FakeStore):
        self._store = store
        self._active = False
        self._identity: dict[tuple[type, UUID], Any] = {}
        self._repositories: dict[type, FakeRepository] = {}
        self.saves = 0

    @property
    def in_transaction(self) -> bool:
        return self._active

    async def begin(self) -> None:
        if self._active:
            raise TransactionAlreadyActiveError()
        self._identity.clear()
        self._active = True
        self._store.begins += 1

    async def commit(self) -> None:
        if not self._active:
            raise NoActiveTransactionError("commit")
        for (model, entity_id), entity in self._identity.items():
            table = self._store.table(model)
            if entity is _DELETED:
                table.pop(entity_id, None)
            else:
                table[entity_id] = {c: getattr(entity, c) for c in _columns(model)}
        self._identity.clear()
        self._active = False
        self._store.commits += 1

    async def rollback(self) -> None:
        if not self._active:
            raise NoActiveTransactionError("rollback")
        self._identity.clear()
        self._active = False
        self._store.rollbacks += 1

    async def save_changes(self) -> int:
        self.saves += 1
        return len(self._identity)

    def repository(self, model: type) -> "FakeRepository":
        if model not in self._repositories:
            self._repositories[model] = FakeRepository(self, model)
        return self._repositories[model]

    # ─── identity map, used by FakeRepository ────────────────────

    def _load(self, model: type, entity_id: UUID) -> Any | None:
        key = (model, entity_id)
        if key in self._identity:
            entity = self._identity[key]
            return None if entity is _DELETED else entity
        row = self._store.get(model, entity_id)
        if row is None:
            return None
        entity = model(**row)
        self._identity[key] = entity
        return entity

    def _all(self, model: type) -> list[Any]:
        ids = set(self._store.table(model))
        ids.update(eid for (m, eid) in self._identity if m is model)
        loaded = (self._load(model, eid) for eid in ids)
        return [e for e in loaded if e is not None]

    def _track(self, entity: Any) -> None:
        self._identity[(type(entity), entity.id)] = entity

    def _forget(self, entity: Any) -> None:
        self._identity[(type(entity), entity.id)] = _DELETED


class FakeRepository:
    def __init__(self, uow: FakeUnitOfWork, model: type):
        self._uow = uow
        self._model = model

    async def get_by_id(self, entity_id: UUID) -> Any | None:
        return self._uow._load(self._model, entity_id)

    async def add(self, entity: Any) -> Any:
        self._uow._track(entity)
        return entity

    async def update(self, entity: Any) -> Any:
        self._uow._track(entity)
        return entity

    async def remove(self, entity: Any) -> None:
        self._uow._forget(entity)

    def query(self) -> Any:
        raise NotImplementedError("in-memory repository has no SQL query builder")

    async def find(self, **filters: object) -> list[Any]:
        return [e for e in self._uow._all(self._model) if self._matches(e, filters)]

    async def find_one(self, **filters: object) -> Any | None:
        rows = await self.find(**filters)
        return rows[0] if rows else None

    async def count(self, **filters: object) -> int:
        return len(await self.find(**filters))

    async def list_page(
        self,
        page: int,
        page_size: int,
        order_by: str = "created_at",
        descending: bool = True,
        **filters: object,
    ) -> tuple[list[Any], int]:
        rows = sorted(
            await self.find(**filters),
            key=lambda e: getattr(e, order_by), reverse=descending,
        )
        start = (page - 1) * page_size
        return rows[start:start + page_size], len(rows)

    @staticmethod
    def _matches(entity: Any, filters: dict[str, object]) -> bool:
        return all(_raw(getattr(entity, k)) == _raw(v) for k, v in filters.items())


class FlakyCache(InMemoryCacheService):
    """InMemoryCacheService whose chosen operations fail a set number of times."""

    def __init__(self) -> None:
        super().__init__()
        self.failures: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []

    def fail(self, operation: str, times: int = 1_000_000) -> None:
        self.failures[operation] = times

    def _maybe_fail(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        remaining = self.failures.get(operation, 0)
        if remaining > 0:
            self.failures[operation] = remaining - 1
            raise CacheError("connection refused", operation)

    async def get(self, key: str) -> bytes | None:
        self._maybe_fail("get", key)
        return await super().get(key)

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._maybe_fail("set", key)
        await super().set(key, value, ttl_seconds)

    async def remove(self, key: str) -> None:
        self._maybe_fail("remove", key)
        await super().remove(key)

    async def remove_by_pattern(self, pattern: str) -> int:
        self._maybe_fail("remove_by_pattern", pattern)
        return await super().remove_by_pattern(pattern)

    def evictions(self) -> list[str]:
        return [key for op, key in self.calls if op in ("remove", "remove_by_pattern")]
