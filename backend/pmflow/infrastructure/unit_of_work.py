"""SQLAlchemy Unit of Work — one AsyncSession, at most one explicit transaction.

Invariants:
    - begin() while a transaction is open raises TransactionAlreadyActiveError (no nesting)
    - commit()/rollback() without an open transaction raise NoActiveTransactionError
    - A failed commit leaves the session rolled back and the unit of work idle
    - repository(Model) returns the same repository instance for the life of the unit

Design Decisions:
    - Explicit begin over autobegin: the Transaction stage owns the boundary, so a
      query request never holds a write transaction open
    - save_changes() = flush: writes become visible to later reads in the same
      transaction; nothing is durable until commit()
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pmflow.core.errors import NoActiveTransactionError, TransactionAlreadyActiveError
from pmflow.infrastructure.repositories import SqlAlchemyRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """UnitOfWork implementation over a single AsyncSession."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._active = False
        self._repositories: dict[type, SqlAlchemyRepository[Any]] = {}

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def in_transaction(self) -> bool:
        return self._active

    async def begin(self) -> None:
        if self._active:
            raise TransactionAlreadyActiveError()
        if self._session.in_transaction():
            # implicit read transaction from an earlier query; nothing to keep
            await self._session.rollback()
        await self._session.begin()
        self._active = True

    async def commit(self) -> None:
        if not self._active:
            raise NoActiveTransactionError("commit")
        try:
            await self._session.commit()
        except BaseException:
            await self._session.rollback()
            raise
        finally:
            self._active = False

    async def rollback(self) -> None:
        if not self._active:
            raise NoActiveTransactionError("rollback")
        try:
            await self._session.rollback()
        finally:
            self._active = False

    async def save_changes(self) -> int:
        pending = (
            len(self._session.new) + len(self._session.dirty)
            + len(self._session.deleted)
        )
        await self._session.flush()
        return pending

    def repository(self, model: type) -> SqlAlchemyRepository[Any]:
        repo = self._repositories.get(model)
        if repo is None:
            repo = SqlAlchemyRepository(self._session, model)
            self._repositories[model] = repo
        return repo
