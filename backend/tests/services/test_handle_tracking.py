"""Time entry handlers — existence checks, per-task totals, per-user date windows."""

import asyncio
from datetime import date, timedelta
from uuid import uuid4

import pytest

from pmflow.core import cache_keys as keys
from pmflow.core import requests as rq
from pmflow.core.result import FailureKind
from pmflow.models.time_entry import TimeEntry

YESTERDAY = date.today() - timedelta(days=1)


@pytest.fixture
async def task_and_user(dispatcher):
    org = (await dispatcher.execute(rq.CreateOrganizationCommand(name="Acme"))).value
    user = (await dispatcher.execute(rq.CreateUserCommand(
        email="dev@acme.io", first_name="Dev", last_name="One", organization_id=org.id,
    ))).value
    project = (await dispatcher.execute(rq.CreateProjectCommand(name="P", code="P"))).value
    task = (await dispatcher.execute(
        rq.CreateTaskCommand(project_id=project.id, title="t", code="T-1"),
    )).value
    return task, user


async def _log(dispatcher, task, user, hours, day=YESTERDAY):
    return await dispatcher.execute(rq.CreateTimeEntryCommand(
        user_id=user.id, task_id=task.id, hours=hours, date=day,
    ))


async def test_entry_requires_existing_task(dispatcher, task_and_user):
    _, user = task_and_user
    result = await dispatcher.execute(rq.CreateTimeEntryCommand(
        user_id=user.id, task_id=uuid4(), hours=1, date=YESTERDAY,
    ))
    assert result.kind is FailureKind.NOT_FOUND


async def test_task_total_is_sum_of_entries(dispatcher, task_and_user):
    task, user = task_and_user
    await _log(dispatcher, task, user, 1.5)
    await _log(dispatcher, task, user, 2.25)
    result = await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))
    assert result.value.total_hours == 3.75
    assert len(result.value.entries) == 2


async def test_new_entry_evicts_task_and_user_views(dispatcher, task_and_user, cache):
    task, user = task_and_user
    await _log(dispatcher, task, user, 1)
    await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))
    await dispatcher.execute(rq.GetTimeEntriesByUserQuery(user_id=user.id))

    await _log(dispatcher, task, user, 2)

    assert await cache.get(keys.related(keys.TIME_ENTRY_PREFIX, "task", task.id)) is None
    assert await cache.get(keys.time_entries_by_user(user.id, None, None)) is None
    result = await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))
    assert result.value.total_hours == 3


async def test_user_entries_filtered_by_window(dispatcher, task_and_user):
    task, user = task_and_user
    await _log(dispatcher, task, user, 1, day=YESTERDAY - timedelta(days=10))
    await _log(dispatcher, task, user, 2, day=YESTERDAY)
    result = await dispatcher.execute(rq.GetTimeEntriesByUserQuery(
        user_id=user.id, start=YESTERDAY - timedelta(days=2),
    ))
    assert [e.hours for e in result.value] == [2]


async def test_update_entry_evicts_entity_and_task_total(dispatcher, task_and_user):
    task, user = task_and_user
    entry = (await _log(dispatcher, task, user, 1)).value
    await dispatcher.execute(rq.GetTimeEntryByIdQuery(id=entry.id))
    await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))

    await dispatcher.execute(rq.UpdateTimeEntryCommand(id=entry.id, hours=4, date=YESTERDAY))

    single = await dispatcher.execute(rq.GetTimeEntryByIdQuery(id=entry.id))
    totals = await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))
    assert single.value.hours == 4
    assert totals.value.total_hours == 4


async def test_delete_entry(dispatcher, task_and_user):
    task, user = task_and_user
    entry = (await _log(dispatcher, task, user, 1)).value
    assert (await dispatcher.execute(rq.DeleteTimeEntryCommand(id=entry.id))).is_success
    missing = await dispatcher.execute(rq.GetTimeEntryByIdQuery(id=entry.id))
    assert missing.kind is FailureKind.NOT_FOUND


async def test_concurrent_entries_for_one_task_both_commit(dispatcher, task_and_user, store):
    task, user = task_and_user

    first, second = await asyncio.gather(
        _log(dispatcher, task, user, 5), _log(dispatcher, task, user, 5),
    )

    assert first.is_success and second.is_success
    assert store.count(TimeEntry) == 2
    result = await dispatcher.execute(rq.GetTimeEntriesByTaskQuery(task_id=task.id))
    assert result.value.total_hours == 10
