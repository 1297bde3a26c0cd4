"""Project, sprint and task handlers through the production registry.

Tests cover:
    - Project code uniqueness and status transitions
    - Read-through caching and eviction after update
    - Project delete removes every child and evicts their keys
    - Sprint lifecycle and delete detaching tasks
    - Task sprint checks, completed_at stamping and paged listing
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from pmflow.core import cache_keys as keys
from pmflow.core import requests as rq
from pmflow.core.domain_types import ProjectStatus, SprintStatus, TaskStatus
from pmflow.core.result import FailureKind
from pmflow.models.project import Project
from pmflow.models.sprint import Sprint
from pmflow.models.task import Task
from pmflow.models.time_entry import TimeEntry
from pmflow.models.user import User


@pytest.fixture
async def project(dispatcher):
    result = await dispatcher.execute(rq.CreateProjectCommand(name="Apollo", code="APL"))
    assert result.is_success
    return result.value


@pytest.fixture
async def user(dispatcher):
    org = await dispatcher.execute(rq.CreateOrganizationCommand(name="Acme"))
    result = await dispatcher.execute(rq.CreateUserCommand(
        email="Dev@Acme.io", first_name="Dev", last_name="One",
        organization_id=org.value.id,
    ))
    return result.value


# --- Projects -----------------------------------------------------------------

async def test_create_project_starts_in_planning(project, store):
    assert project.status is ProjectStatus.PLANNING
    assert project.budget_currency == "USD"
    assert store.count(Project) == 1


async def test_duplicate_project_code_conflicts(dispatcher, project, store):
    result = await dispatcher.execute(rq.CreateProjectCommand(name="Other", code="APL"))
    assert result.kind is FailureKind.CONFLICT
    assert store.count(Project) == 1


async def test_unknown_organization_is_not_found(dispatcher):
    result = await dispatcher.execute(rq.CreateProjectCommand(
        name="Orphan", code="ORP", organization_id=uuid4(),
    ))
    assert result.kind is FailureKind.NOT_FOUND


async def test_read_is_cached_and_update_evicts(dispatcher, project, cache):
    key = keys.entity(keys.PROJECT_PREFIX, project.id)
    first = await dispatcher.execute(rq.GetProjectByIdQuery(id=project.id))
    assert first.value.name == "Apollo"
    assert await cache.get(key) is not None

    await dispatcher.execute(rq.UpdateProjectCommand(id=project.id, name="Apollo II"))
    assert await cache.get(key) is None

    fresh = await dispatcher.execute(rq.GetProjectByIdQuery(id=project.id))
    assert fresh.value.name == "Apollo II"


async def test_update_evicts_by_code_key(dispatcher, project, cache):
    await dispatcher.execute(rq.GetProjectByCodeQuery(code="APL"))
    assert await cache.get(keys.project_by_code("APL")) is not None
    await dispatcher.execute(rq.ChangeProjectStatusCommand(
        id=project.id, status=ProjectStatus.ACTIVE,
    ))
    assert await cache.get(keys.project_by_code("APL")) is None


async def test_list_projects_is_evicted_by_create(dispatcher, project, cache):
    listed = await dispatcher.execute(rq.ListProjectsQuery(page=1, page_size=10))
    assert listed.value.total_count == 1
    await dispatcher.execute(rq.CreateProjectCommand(name="Gemini", code="GEM"))
    listed = await dispatcher.execute(rq.ListProjectsQuery(page=1, page_size=10))
    assert listed.value.total_count == 2
    assert listed.value.items[0].code == "GEM"


async def test_invalid_status_transition_conflicts(dispatcher, project):
    result = await dispatcher.execute(rq.ChangeProjectStatusCommand(
        id=project.id, status=ProjectStatus.COMPLETED,
    ))
    assert result.kind is FailureKind.CONFLICT


async def test_completing_sets_progress_to_100(dispatcher, project):
    await dispatcher.execute(rq.ChangeProjectStatusCommand(
        id=project.id, status=ProjectStatus.ACTIVE,
    ))
    result = await dispatcher.execute(rq.ChangeProjectStatusCommand(
        id=project.id, status=ProjectStatus.COMPLETED,
    ))
    assert result.value.progress_percentage == 100.0


async def test_delete_project_removes_children(dispatcher, project, user, store, cache):
    sprint = await dispatcher.execute(rq.CreateSprintCommand(
        project_id=project.id, name="S1", sprint_number=1,
        start_date=date.today() - timedelta(days=1),
        end_date=date.today() + timedelta(days=14),
    ))
    task = await dispatcher.execute(rq.CreateTaskCommand(
        project_id=project.id, title="Build", code="T-1", sprint_id=sprint.value.id,
    ))
    await dispatcher.execute(rq.CreateTimeEntryCommand(
        user_id=user.id, task_id=task.value.id, hours=2,
        date=date.today() - timedelta(days=1),
    ))
    await dispatcher.execute(rq.GetTaskByIdQuery(id=task.value.id))
    assert await cache.get(keys.entity(keys.TASK_PREFIX, task.value.id)) is not None

    result = await dispatcher.execute(rq.DeleteProjectCommand(id=project.id))

    assert result.is_success
    for model in (Project, Sprint, Task, TimeEntry):
        assert store.count(model) == 0
    assert store.count(User) == 1
    assert await cache.get(keys.entity(keys.TASK_PREFIX, task.value.id)) is None


async def test_delete_missing_project_is_not_found(dispatcher):
    result = await dispatcher.execute(rq.DeleteProjectCommand(id=uuid4()))
    assert result.kind is FailureKind.NOT_FOUND


# --- Sprints ------------------------------------------------------------------

async def _sprint(dispatcher, project, number=1, start=None):
    start = start or date.today() - timedelta(days=1)
    result = await dispatcher.execute(rq.CreateSprintCommand(
        project_id=project.id, name=f"S{number}", sprint_number=number,
        start_date=start, end_date=start + timedelta(days=14),
    ))
    return result


async def test_sprint_number_unique_per_project(dispatcher, project):
    await _sprint(dispatcher, project)
    duplicate = await _sprint(dispatcher, project)
    assert duplicate.kind is FailureKind.CONFLICT


async def test_sprint_lifecycle(dispatcher, project):
    sprint = (await _sprint(dispatcher, project)).value
    started = await dispatcher.execute(rq.StartSprintCommand(id=sprint.id))
    assert started.value.status is SprintStatus.ACTIVE
    completed = await dispatcher.execute(rq.CompleteSprintCommand(id=sprint.id))
    assert completed.value.status is SprintStatus.COMPLETED
    assert completed.value.completed_at is not None

    edit = await dispatcher.execute(rq.UpdateSprintCommand(
        id=sprint.id, name="late", start_date=sprint.start_date, end_date=sprint.end_date,
    ))
    assert edit.kind is FailureKind.CONFLICT
    assert edit.reason == "Cannot update completed sprint"


async def test_future_sprint_cannot_start(dispatcher, project):
    sprint = (await _sprint(dispatcher, project, start=date.today() + timedelta(days=3))).value
    result = await dispatcher.execute(rq.StartSprintCommand(id=sprint.id))
    assert result.reason == "Cannot start sprint before start date"


async def test_sprints_by_project_sorted_by_number(dispatcher, project):
    await _sprint(dispatcher, project, number=2)
    await _sprint(dispatcher, project, number=1)
    result = await dispatcher.execute(rq.GetSprintsByProjectQuery(project_id=project.id))
    assert [s.sprint_number for s in result.value] == [1, 2]


async def test_new_sprint_evicts_project_sprint_list(dispatcher, project, cache):
    await dispatcher.execute(rq.GetSprintsByProjectQuery(project_id=project.id))
    await _sprint(dispatcher, project)
    result = await dispatcher.execute(rq.GetSprintsByProjectQuery(project_id=project.id))
    assert len(result.value) == 1


async def test_delete_sprint_detaches_tasks(dispatcher, project, store):
    sprint = (await _sprint(dispatcher, project)).value
    task = await dispatcher.execute(rq.CreateTaskCommand(
        project_id=project.id, title="Build", code="T-1", sprint_id=sprint.id,
    ))
    await dispatcher.execute(rq.DeleteSprintCommand(id=sprint.id))
    assert store.count(Sprint) == 0
    assert store.get(Task, task.value.id)["sprint_id"] is None


# --- Tasks --------------------------------------------------------------------

async def test_task_code_unique_per_project(dispatcher, project):
    await dispatcher.execute(rq.CreateTaskCommand(project_id=project.id, title="a", code="T-1"))
    result = await dispatcher.execute(
        rq.CreateTaskCommand(project_id=project.id, title="b", code="T-1"),
    )
    assert result.kind is FailureKind.CONFLICT


async def test_task_sprint_must_belong_to_project(dispatcher, project):
    other = (await dispatcher.execute(rq.CreateProjectCommand(name="X", code="X"))).value
    sprint = (await _sprint(dispatcher, other)).value
    result = await dispatcher.execute(rq.CreateTaskCommand(
        project_id=project.id, title="a", code="T-1", sprint_id=sprint.id,
    ))
    assert result.reason == "Sprint belongs to a different project"


async def test_done_stamps_and_reopen_clears_completed_at(dispatcher, project):
    task = (await dispatcher.execute(
        rq.CreateTaskCommand(project_id=project.id, title="a", code="T-1"),
    )).value

    def update(status):
        return rq.UpdateTaskCommand(
            id=task.id, title="a", status=status, priority=task.priority,
        )

    done = await dispatcher.execute(update(TaskStatus.DONE))
    assert done.value.completed_at is not None
    reopened = await dispatcher.execute(update(TaskStatus.IN_PROGRESS))
    assert reopened.value.completed_at is None


async def test_tasks_by_project_paged_and_filtered(dispatcher, project):
    for n in range(3):
        await dispatcher.execute(
            rq.CreateTaskCommand(project_id=project.id, title=f"t{n}", code=f"T-{n}"),
        )
    page = await dispatcher.execute(rq.GetTasksByProjectQuery(
        project_id=project.id, page=1, page_size=2,
    ))
    assert page.value.total_count == 3
    assert page.value.total_pages == 2
    assert len(page.value.items) == 2

    done = await dispatcher.execute(rq.GetTasksByProjectQuery(
        project_id=project.id, status=TaskStatus.DONE,
    ))
    assert done.value.total_count == 0


async def test_task_update_evicts_project_task_pages(dispatcher, project):
    task = (await dispatcher.execute(
        rq.CreateTaskCommand(project_id=project.id, title="a", code="T-1"),
    )).value
    await dispatcher.execute(rq.GetTasksByProjectQuery(project_id=project.id))
    await dispatcher.execute(rq.UpdateTaskCommand(
        id=task.id, title="renamed", status=TaskStatus.TODO, priority=task.priority,
    ))
    page = await dispatcher.execute(rq.GetTasksByProjectQuery(project_id=project.id))
    assert page.value.items[0].title == "renamed"
