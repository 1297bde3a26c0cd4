"""Project Routes — project CRUD, status changes and lookups by id or code."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from pmflow.api.deps import get_dispatcher, respond
from pmflow.core import requests as rq
from pmflow.core.domain_types import ProjectStatus
from pmflow.schemas.projects import ProjectCreate, ProjectStatusChange, ProjectUpdate
from pmflow.services.request_dispatch import RequestDispatcher

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateProjectCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@router.get("")
async def list_projects(
    page: int = 1,
    page_size: int = 10,
    organization_id: UUID | None = None,
    project_status: ProjectStatus | None = Query(None, alias="status"),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.ListProjectsQuery(
        page=page, page_size=page_size,
        organization_id=organization_id, status=project_status,
    )))


@router.get("/code/{code}")
async def get_project_by_code(
    code: str, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetProjectByCodeQuery(code=code)))


@router.get("/{project_id}")
async def get_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetProjectByIdQuery(id=project_id)))


@router.put("/{project_id}")
async def update_project(
    project_id: UUID, body: ProjectUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateProjectCommand(id=project_id, **body.model_dump()),
    ))


@router.patch("/{project_id}/status")
async def change_project_status(
    project_id: UUID, body: ProjectStatusChange,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.ChangeProjectStatusCommand(id=project_id, status=body.status),
    ))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteProjectCommand(id=project_id))
    return respond(result, status.HTTP_204_NO_CONTENT)
