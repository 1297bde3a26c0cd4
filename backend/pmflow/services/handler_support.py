"""Handler Support — base class and helpers shared by the per-aggregate handlers.

Invariants:
    - Handler instances live for one request and only touch that request's
      unit of work and the shared cache
    - New rows get their id and created_at here, before flush, so the DTO built
      right after add() is complete
    - Read helpers return Success(dto) or Failure(NOT_FOUND); they never raise for
      a missing row

Design Decisions:
    - Read paths share three shapes (single entity, project-scoped list, page):
      one helper each instead of ten copies of the cache-aside dance
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Sequence, TypeVar

from pydantic import BaseModel, TypeAdapter

from pmflow.core.domain_types import CacheTTL
from pmflow.core.repository_protocols import Repository
from pmflow.core.result import Result, Success, not_found
from pmflow.schemas.common import PagedResult
from pmflow.services.cached_read import cached_read
from pmflow.services.request_scope import RequestScope

D = TypeVar("D", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today() -> date:
    return utcnow().date()


def new_id() -> uuid.UUID:
    return uuid.uuid4()


def enum_value(value: Any) -> Any:
    """Enum member or raw value -> the raw value stored in the ORM column."""
    return getattr(value, "value", value)


def by_created(rows: Sequence[Any]) -> list[Any]:
    """Newest first, matching list_page's default ordering."""
    return sorted(rows, key=lambda r: r.created_at, reverse=True)


class ScopedHandlers:
    """Base for handler classes constructed per request from its RequestScope."""

    def __init__(self, scope: RequestScope):
        self.scope = scope
        self.uow = scope.uow
        self.cache = scope.cache

    def repo(self, model: type) -> Repository[Any]:
        return self.uow.repository(model)

    def touched(self, *keys: str) -> None:
        self.scope.mark_touched(*keys)

    # ─── Cache-aside reads ───────────────────────────────────────

    async def read_entity(
        self,
        key: str,
        dto: type[D],
        model: type,
        entity_id: uuid.UUID,
        resource: str,
        ttl: CacheTTL = CacheTTL.MEDIUM,
    ) -> Result:
        async def load() -> D | None:
            row = await self.repo(model).get_by_id(entity_id)
            return dto.model_validate(row) if row is not None else None

        value = await cached_read(self.cache, key, ttl, TypeAdapter(dto), load)
        if value is None:
            return not_found(resource, entity_id)
        return Success(value)

    async def read_list(
        self,
        key: str,
        dto: type[D],
        model: type,
        ttl: CacheTTL = CacheTTL.SHORT,
        **filters: object,
    ) -> Result:
        async def load() -> list[D]:
            rows = await self.repo(model).find(**filters)
            return [dto.model_validate(r) for r in by_created(rows)]

        value = await cached_read(self.cache, key, ttl, TypeAdapter(list[dto]), load)
        return Success(value)

    async def read_page(
        self,
        key: str,
        dto: type[D],
        model: type,
        page: int,
        page_size: int,
        ttl: CacheTTL = CacheTTL.SHORT,
        **filters: object,
    ) -> Result:
        clean = {k: enum_value(v) for k, v in filters.items() if v is not None}

        async def load() -> PagedResult[D]:
            rows, total = await self.repo(model).list_page(page, page_size, **clean)
            return PagedResult[dto].create(
                [dto.model_validate(r) for r in rows], page, page_size, total,
            )

        value = await cached_read(
            self.cache, key, ttl, TypeAdapter(PagedResult[dto]), load,
        )
        return Success(value)
