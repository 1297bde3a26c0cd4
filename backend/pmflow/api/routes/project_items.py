"""Project Item Routes — risks, issues, documents and resource allocations.

All four aggregates hang off a project and share the same shape: CRUD by id
plus a per-project listing. Issues add resolve and status transitions.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from pmflow.api.deps import get_dispatcher, respond
from pmflow.core import requests as rq
from pmflow.schemas.project_items import (
    DocumentCreate, DocumentUpdate, IssueCreate, IssueResolve, IssueStatusChange,
    IssueUpdate, ResourceAllocationCreate, ResourceAllocationUpdate,
    RiskCreate, RiskUpdate,
)
from pmflow.services.request_dispatch import RequestDispatcher

risks_router = APIRouter(prefix="/api/v1/risks", tags=["risks"])
issues_router = APIRouter(prefix="/api/v1/issues", tags=["issues"])
documents_router = APIRouter(prefix="/api/v1/documents", tags=["documents"])
allocations_router = APIRouter(
    prefix="/api/v1/resource-allocations", tags=["resource-allocations"],
)


# ─── Risks ───────────────────────────────────────────────────────

@risks_router.post("", status_code=status.HTTP_201_CREATED)
async def create_risk(
    body: RiskCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateRiskCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@risks_router.get("/project/{project_id}")
async def get_risks_by_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetRisksByProjectQuery(project_id=project_id),
    ))


@risks_router.get("/{risk_id}")
async def get_risk(
    risk_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetRiskByIdQuery(id=risk_id)))


@risks_router.put("/{risk_id}")
async def update_risk(
    risk_id: UUID, body: RiskUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateRiskCommand(id=risk_id, **body.model_dump()),
    ))


@risks_router.delete("/{risk_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_risk(
    risk_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteRiskCommand(id=risk_id))
    return respond(result, status.HTTP_204_NO_CONTENT)


# ─── Issues ──────────────────────────────────────────────────────

@issues_router.post("", status_code=status.HTTP_201_CREATED)
async def create_issue(
    body: IssueCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateIssueCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@issues_router.get("/project/{project_id}")
async def get_issues_by_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetIssuesByProjectQuery(project_id=project_id),
    ))


@issues_router.get("/{issue_id}")
async def get_issue(
    issue_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetIssueByIdQuery(id=issue_id)))


@issues_router.put("/{issue_id}")
async def update_issue(
    issue_id: UUID, body: IssueUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateIssueCommand(id=issue_id, **body.model_dump()),
    ))


@issues_router.post("/{issue_id}/resolve")
async def resolve_issue(
    issue_id: UUID, body: IssueResolve,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.ResolveIssueCommand(id=issue_id, resolution=body.resolution),
    ))


@issues_router.patch("/{issue_id}/status")
async def change_issue_status(
    issue_id: UUID, body: IssueStatusChange,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.ChangeIssueStatusCommand(id=issue_id, status=body.status),
    ))


@issues_router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(
    issue_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteIssueCommand(id=issue_id))
    return respond(result, status.HTTP_204_NO_CONTENT)


# ─── Documents ───────────────────────────────────────────────────

@documents_router.post("", status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentCreate, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.CreateDocumentCommand(**body.model_dump()))
    return respond(result, status.HTTP_201_CREATED)


@documents_router.get("/project/{project_id}")
async def get_documents_by_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetDocumentsByProjectQuery(project_id=project_id),
    ))


@documents_router.get("/{document_id}")
async def get_document(
    document_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(rq.GetDocumentByIdQuery(id=document_id)))


@documents_router.put("/{document_id}")
async def update_document(
    document_id: UUID, body: DocumentUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateDocumentCommand(id=document_id, **body.model_dump()),
    ))


@documents_router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(rq.DeleteDocumentCommand(id=document_id))
    return respond(result, status.HTTP_204_NO_CONTENT)


# ─── Resource Allocations ────────────────────────────────────────

@allocations_router.post("", status_code=status.HTTP_201_CREATED)
async def create_resource_allocation(
    body: ResourceAllocationCreate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(
        rq.CreateResourceAllocationCommand(**body.model_dump()),
    )
    return respond(result, status.HTTP_201_CREATED)


@allocations_router.get("/project/{project_id}")
async def get_resource_allocations_by_project(
    project_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetResourceAllocationsByProjectQuery(project_id=project_id),
    ))


@allocations_router.get("/{allocation_id}")
async def get_resource_allocation(
    allocation_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.GetResourceAllocationByIdQuery(id=allocation_id),
    ))


@allocations_router.put("/{allocation_id}")
async def update_resource_allocation(
    allocation_id: UUID, body: ResourceAllocationUpdate,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    return respond(await dispatcher.execute(
        rq.UpdateResourceAllocationCommand(id=allocation_id, **body.model_dump()),
    ))


@allocations_router.delete("/{allocation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource_allocation(
    allocation_id: UUID, dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.execute(
        rq.DeleteResourceAllocationCommand(id=allocation_id),
    )
    return respond(result, status.HTTP_204_NO_CONTENT)
