"""Organization & User Routes — thin adapters from HTTP bodies to pipeline requests."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from pmflow.api.deps import get_dispatcher, respond
from pmflow.core import requests as rq
from pmflow.schemas.organizations import (
    OrganizationCreate, OrganizationUpdate, UserCreate, UserUpdate,
)
from pmflow.services.request_dispatch import RequestDispatcher

router = APIRouter(prefix="/api/v1/organizations", tags=["organizations"])
users_router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_organization(
    body: OrganizationCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateOrganizationCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@router.get("")
async def list_organizations(
    page: int = 1,
    page_size: int = 10,
    is_active: bool | None = None,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.ListOrganizationsQuery(
        page=page, page_size=page_size, is_active=is_active,
    )))


@router.get("/{organization_id}")
async def get_organization(
    organization_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetOrganizationByIdQuery(id=organization_id),
    ))


@router.put("/{organization_id}")
async def update_organization(
    organization_id: UUID,
    body: OrganizationUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateOrganizationCommand(id=organization_id, **body.model_dump()),
    ))


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    organization_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteOrganizationCommand(id=organization_id))
    return respond(result, status.HTTP_204_NO_CONTENT)


# ─── Users ───────────────────────────────────────────────────────

@users_router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateUserCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@users_router.get("")
async def list_users(
    page: int = 1,
    page_size: int = 10,
    organization_id: UUID | None = None,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.ListUsersQuery(
        page=page, page_size=page_size, organization_id=organization_id,
    )))


@users_router.get("/email/{email}")
async def get_user_by_email(
    email: str, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetUserByEmailQuery(email=email)))


@users_router.get("/{user_id}")
async def get_user(
    user_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetUserByIdQuery(id=user_id)))


@users_router.put("/{user_id}")
async def update_user(
    user_id: UUID, body: UserUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateUserCommand(id=user_id, **body.model_dump()),
    ))


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteUserCommand(id=user_id))
    return respond(result, status.HTTP_204_NO_CONTENT)
