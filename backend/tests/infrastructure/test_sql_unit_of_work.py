"""SQLAlchemy unit of work and repository against in-memory SQLite.

Tests cover:
    - Explicit transaction boundaries: nested begin, commit/rollback without begin
    - Rolled-back writes never reach the database
    - Equality filters, counting and paging in the generic repository
    - The production dispatcher end to end over a real session
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from pmflow.config import Settings
from pmflow.core import requests as rq
from pmflow.core.errors import (
    DatabaseError, NoActiveTransactionError, TransactionAlreadyActiveError,
)
from pmflow.db.base import Base
from pmflow.infrastructure.cache import InMemoryCacheService
from pmflow.infrastructure.database import DatabaseSessionManager
from pmflow.models.organization import Organization
from pmflow.services.register_requests import build_registry
from pmflow.services.request_dispatch import RequestDispatcher, build_pipeline


@pytest.fixture
async def manager():
    mgr = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with mgr.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield mgr
    await mgr.close()


def _org(name: str, minutes: int = 0, active: bool = True) -> Organization:
    return Organization(
        id=uuid4(), name=name, is_active=active, created_by="test",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


async def _count(manager) -> int:
    async with manager.unit_of_work() as uow:
        return await uow.repository(Organization).count()


async def test_nested_begin_is_rejected(manager):
    async with manager.unit_of_work() as uow:
        await uow.begin()
        with pytest.raises(TransactionAlreadyActiveError):
            await uow.begin()


async def test_commit_without_begin_is_rejected(manager):
    async with manager.unit_of_work() as uow:
        with pytest.raises(NoActiveTransactionError):
            await uow.commit()
        with pytest.raises(NoActiveTransactionError):
            await uow.rollback()


async def test_commit_persists(manager):
    async with manager.unit_of_work() as uow:
        await uow.begin()
        await uow.repository(Organization).add(_org("Acme"))
        assert await uow.save_changes() == 1
        await uow.commit()
    assert await _count(manager) == 1


async def test_rollback_discards_flushed_rows(manager):
    async with manager.unit_of_work() as uow:
        await uow.begin()
        await uow.repository(Organization).add(_org("Acme"))
        await uow.save_changes()
        assert await uow.repository(Organization).count() == 1
        await uow.rollback()
    assert await _count(manager) == 0


async def test_open_transaction_rolled_back_on_exit(manager):
    async with manager.unit_of_work() as uow:
        await uow.begin()
        await uow.repository(Organization).add(_org("Acme"))
        await uow.save_changes()
    assert await _count(manager) == 0


async def test_begin_after_a_read(manager):
    async with manager.unit_of_work() as uow:
        await uow.repository(Organization).find()
        await uow.begin()
        await uow.repository(Organization).add(_org("Acme"))
        await uow.commit()
    assert await _count(manager) == 1


async def test_repository_filters_and_pages(manager):
    async with manager.unit_of_work() as uow:
        await uow.begin()
        repo = uow.repository(Organization)
        for n in range(5):
            await repo.add(_org(f"org-{n}", minutes=n, active=n % 2 == 0))
        await uow.commit()

    async with manager.unit_of_work() as uow:
        repo = uow.repository(Organization)
        assert uow.repository(Organization) is repo
        assert await repo.count(is_active=True) == 3
        assert (await repo.find_one(name="org-3")).is_active is False
        items, total = await repo.list_page(1, 2)
        assert total == 5
        assert [o.name for o in items] == ["org-4", "org-3"]
        items, total = await repo.list_page(2, 2, is_active=True)
        assert (total, [o.name for o in items]) == (3, ["org-0"])


async def test_dispatcher_over_sqlite(manager):
    cache = InMemoryCacheService()
    dispatcher = RequestDispatcher(
        build_registry(),
        build_pipeline(Settings(cache_backend="memory")),
        manager.unit_of_work,
        cache,
    )
    created = await dispatcher.execute(rq.CreateProjectCommand(name="Apollo", code="APL"))
    assert created.is_success

    conflict = await dispatcher.execute(rq.CreateProjectCommand(name="Again", code="APL"))
    assert not conflict.is_success

    task = await dispatcher.execute(rq.CreateTaskCommand(
        project_id=created.value.id, title="Build", code="T-1",
    ))
    assert task.is_success

    fetched = await dispatcher.execute(rq.GetProjectByCodeQuery(code="APL"))
    assert fetched.value.id == created.value.id

    deleted = await dispatcher.execute(rq.DeleteProjectCommand(id=created.value.id))
    assert deleted.is_success
    gone = await dispatcher.execute(rq.GetTaskByIdQuery(id=task.value.id))
    assert not gone.is_success


async def test_constraint_violation_surfaces_as_database_error(manager):
    org = _org("Acme")
    async with manager.unit_of_work() as uow:
        await uow.begin()
        await uow.repository(Organization).add(org)
        await uow.commit()

    with pytest.raises(DatabaseError) as excinfo:
        async with manager.unit_of_work() as uow:
            await uow.begin()
            duplicate = _org("Acme again")
            duplicate.id = org.id
            await uow.repository(Organization).add(duplicate)
            await uow.commit()

    assert excinfo.value.operation == "commit"
    assert not uow.in_transaction
    assert await _count(manager) == 1


async def test_health_check_reports_connectivity(manager):
    assert await manager.health_check() is True
