"""Task Routes — task CRUD, paged per-project listing and time tracking."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from pmflow.api.deps import get_dispatcher, respond
from pmflow.core import requests as rq
from pmflow.core.domain_types import TaskStatus
from pmflow.schemas.projects import TaskCreate, TaskUpdate
from pmflow.schemas.tracking import TimeEntryCreate, TimeEntryUpdate
from pmflow.services.request_dispatch import RequestDispatcher

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])
time_router = APIRouter(prefix="/api/v1/time-entries", tags=["time-entries"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateTaskCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@router.get("/project/{project_id}")
async def get_tasks_by_project(
    project_id: UUID,
    page: int = 1,
    page_size: int = 10,
    task_status: TaskStatus | None = Query(None, alias="status"),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetTasksByProjectQuery(
        project_id=project_id, page=page, page_size=page_size, status=task_status,
    )))


@router.get("/{task_id}")
async def get_task(
    task_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetTaskByIdQuery(id=task_id)))


@router.put("/{task_id}")
async def update_task(
    task_id: UUID, body: TaskUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateTaskCommand(id=task_id, **body.model_dump()),
    ))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteTaskCommand(id=task_id))
    return respond(result, status.HTTP_204_NO_CONTENT)


# ─── Time entries ────────────────────────────────────────────────

@time_router.post("", status_code=status.HTTP_201_CREATED)
async def create_time_entry(
    body: TimeEntryCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateTimeEntryCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@time_router.get("/task/{task_id}")
async def get_time_entries_by_task(
    task_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetTimeEntriesByTaskQuery(task_id=task_id),
    ))


@time_router.get("/user/{user_id}")
async def get_time_entries_by_user(
    user_id: UUID,
    start: date | None = None,
    end: date | None = None,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetTimeEntriesByUserQuery(user_id=user_id, start=start, end=end),
    ))


@time_router.get("/{entry_id}")
async def get_time_entry(
    entry_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetTimeEntryByIdQuery(id=entry_id)))


@time_router.put("/{entry_id}")
async def update_time_entry(
    entry_id: UUID, body: TimeEntryUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateTimeEntryCommand(id=entry_id, **body.model_dump()),
    ))


@time_router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(
    entry_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteTimeEntryCommand(id=entry_id))
    return respond(result, status.HTTP_204_NO_CONTENT)
