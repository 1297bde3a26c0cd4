"""Generic SQLAlchemy Repository — CRUD plus equality-filtered paging for any model.

Invariants:
    - Bound to the caller's AsyncSession; never commits (the unit of work does)
    - Filters are equality on mapped columns; unknown names raise AttributeError early
    - list_page returns (items, total) where total ignores paging

Design Decisions:
    - One generic class over ten hand-written repositories: every aggregate needs
      the same operations, handlers express the rest through query()
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class SqlAlchemyRepository(Generic[T]):
    def __init__(self, session: AsyncSession, model: type[T]):
        self._session = session
        self._model = model

    async def get_by_id(self, entity_id: UUID) -> T | None:
        return await self._session.get(self._model, entity_id)

    async def add(self, entity: T) -> T:
        self._session.add(entity)
        return entity

    async def update(self, entity: T) -> T:
        # persistent instances are already tracked; add() re-attaches detached ones
        self._session.add(entity)
        return entity

    async def remove(self, entity: T) -> None:
        await self._session.delete(entity)

    def query(self) -> Select:
        return select(self._model)

    async def execute(self, statement: Select) -> list[T]:
        result = await self._session.execute(statement)
        return list(result.scalars().all())

    async def find(self, **filters: object) -> list[T]:
        return await self.execute(self._filtered(self.query(), filters))

    async def find_one(self, **filters: object) -> T | None:
        rows = await self.execute(self._filtered(self.query(), filters).limit(1))
        return rows[0] if rows else None

    async def count(self, **filters: object) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(self._model), filters,
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def list_page(
        self,
        page: int,
        page_size: int,
        order_by: str = "created_at",
        descending: bool = True,
        **filters: object,
    ) -> tuple[Sequence[T], int]:
        column = getattr(self._model, order_by)
        stmt = (
            self._filtered(self.query(), filters)
            .order_by(column.desc() if descending else column.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        items = await self.execute(stmt)
        return items, await self.count(**filters)

    def _filtered(self, stmt: Any, filters: dict[str, object]) -> Any:
        for name, value in filters.items():
            stmt = stmt.where(getattr(self._model, name) == value)
        return stmt
