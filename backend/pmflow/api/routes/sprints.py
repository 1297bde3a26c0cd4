"""Sprint Routes — planning, start/complete and per-project listing."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from pmflow.api.deps import get_dispatcher, respond
from pmflow.core import requests as rq
from pmflow.schemas.projects import SprintCreate, SprintUpdate
from pmflow.services.request_dispatch import RequestDispatcher

router = APIRouter(prefix="/api/v1/sprints", tags=["sprints"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sprint(
    body: SprintCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateSprintCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@router.get("/project/{project_id}")
async def get_sprints_by_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetSprintsByProjectQuery(project_id=project_id),
    ))


@router.get("/{sprint_id}")
async def get_sprint(
    sprint_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetSprintByIdQuery(id=sprint_id)))


@router.put("/{sprint_id}")
async def update_sprint(
    sprint_id: UUID, body: SprintUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateSprintCommand(id=sprint_id, **body.model_dump()),
    ))


@router.post("/{sprint_id}/start")
async def start_sprint(
    sprint_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.StartSprintCommand(id=sprint_id)))


@router.post("/{sprint_id}/complete")
async def complete_sprint(
    sprint_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.CompleteSprintCommand(id=sprint_id)))


@router.delete("/{sprint_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sprint(
    sprint_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteSprintCommand(id=sprint_id))
    return respond(result, status.HTTP_204_NO_CONTENT)
