"""Cache Invalidation Map — which cache keys each command type makes stale.

Invariants:
    - Pure functions of the request: request in, tuple of exact keys / ":*" patterns out
    - Only data derivable from the request itself is used here; keys that need the
      loaded entity (e.g. a task's project id on update) are reported by the handler
      through RequestScope.mark_touched and evicted alongside these
    - Every mutation of an aggregate evicts that aggregate's list pattern

Design Decisions:
    - Explicit function per command over reflection on request fields: a missing entry
      is visible in review, not a silent under-eviction (ADR: explicit registration)
    - Over-eviction of list patterns accepted: lists are cheap to rebuild, stale lists are bugs
"""

from pmflow.core import cache_keys as keys
from pmflow.core.requests import (
    ChangeIssueStatusCommand, ChangeProjectStatusCommand, CompleteSprintCommand,
    CreateDocumentCommand, CreateIssueCommand, CreateOrganizationCommand,
    CreateProjectCommand, CreateResourceAllocationCommand, CreateRiskCommand,
    CreateSprintCommand, CreateTaskCommand, CreateTimeEntryCommand,
    CreateUserCommand, DeleteDocumentCommand, DeleteIssueCommand,
    DeleteOrganizationCommand, DeleteProjectCommand,
    DeleteResourceAllocationCommand, DeleteRiskCommand, DeleteSprintCommand,
    DeleteTaskCommand, DeleteTimeEntryCommand, DeleteUserCommand,
    ResolveIssueCommand, StartSprintCommand, UpdateDocumentCommand,
    UpdateIssueCommand, UpdateOrganizationCommand, UpdateProjectCommand,
    UpdateResourceAllocationCommand, UpdateRiskCommand, UpdateSprintCommand,
    UpdateTaskCommand, UpdateTimeEntryCommand, UpdateUserCommand,
)

Targets = tuple[str, ...]


def _list(prefix: str) -> str:
    return keys.pattern(prefix, "list")


def _by_project(prefix: str, project_id: object) -> str:
    return keys.pattern(prefix, "project", project_id)


# ─── Organizations ───────────────────────────────────────────────

def invalidate_create_organization(request: CreateOrganizationCommand) -> Targets:
    return (_list(keys.ORGANIZATION_PREFIX),)


def invalidate_update_organization(
    request: UpdateOrganizationCommand | DeleteOrganizationCommand,
) -> Targets:
    return (
        keys.entity(keys.ORGANIZATION_PREFIX, request.id),
        _list(keys.ORGANIZATION_PREFIX),
    )


# ─── Users ───────────────────────────────────────────────────────

def invalidate_create_user(request: CreateUserCommand) -> Targets:
    return (keys.user_by_email(request.email), _list(keys.USER_PREFIX))


def invalidate_update_user(
    request: UpdateUserCommand | DeleteUserCommand,
) -> Targets:
    return (keys.entity(keys.USER_PREFIX, request.id), _list(keys.USER_PREFIX))


# ─── Projects ────────────────────────────────────────────────────

def invalidate_create_project(request: CreateProjectCommand) -> Targets:
    return (keys.project_by_code(request.code), _list(keys.PROJECT_PREFIX))


def invalidate_update_project(
    request: UpdateProjectCommand | ChangeProjectStatusCommand | DeleteProjectCommand,
) -> Targets:
    return (
        keys.entity(keys.PROJECT_PREFIX, request.id),
        _list(keys.PROJECT_PREFIX),
    )


# ─── Sprints ─────────────────────────────────────────────────────

def invalidate_create_sprint(request: CreateSprintCommand) -> Targets:
    return (keys.related(keys.SPRINT_PREFIX, "project", request.project_id),)


def invalidate_update_sprint(
    request: UpdateSprintCommand | StartSprintCommand
    | CompleteSprintCommand | DeleteSprintCommand,
) -> Targets:
    return (keys.entity(keys.SPRINT_PREFIX, request.id),)


# ─── Tasks ───────────────────────────────────────────────────────

def invalidate_create_task(request: CreateTaskCommand) -> Targets:
    return (_by_project(keys.TASK_PREFIX, request.project_id),)


def invalidate_update_task(
    request: UpdateTaskCommand | DeleteTaskCommand,
) -> Targets:
    return (keys.entity(keys.TASK_PREFIX, request.id),)


# ─── Time Entries ────────────────────────────────────────────────

def invalidate_create_time_entry(request: CreateTimeEntryCommand) -> Targets:
    return (
        keys.related(keys.TIME_ENTRY_PREFIX, "task", request.task_id),
        keys.pattern(keys.TIME_ENTRY_PREFIX, "user", request.user_id),
    )


def invalidate_update_time_entry(
    request: UpdateTimeEntryCommand | DeleteTimeEntryCommand,
) -> Targets:
    return (keys.entity(keys.TIME_ENTRY_PREFIX, request.id),)


# ─── Project-scoped children (risks, issues, documents, allocations) ──

def invalidate_create_risk(request: CreateRiskCommand) -> Targets:
    return (keys.related(keys.RISK_PREFIX, "project", request.project_id),)


def invalidate_update_risk(request: UpdateRiskCommand | DeleteRiskCommand) -> Targets:
    return (keys.entity(keys.RISK_PREFIX, request.id),)


def invalidate_create_issue(request: CreateIssueCommand) -> Targets:
    return (keys.related(keys.ISSUE_PREFIX, "project", request.project_id),)


def invalidate_update_issue(
    request: UpdateIssueCommand | ResolveIssueCommand
    | ChangeIssueStatusCommand | DeleteIssueCommand,
) -> Targets:
    return (keys.entity(keys.ISSUE_PREFIX, request.id),)


def invalidate_create_document(request: CreateDocumentCommand) -> Targets:
    return (keys.related(keys.DOCUMENT_PREFIX, "project", request.project_id),)


def invalidate_update_document(
    request: UpdateDocumentCommand | DeleteDocumentCommand,
) -> Targets:
    return (keys.entity(keys.DOCUMENT_PREFIX, request.id),)


def invalidate_create_resource_allocation(
    request: CreateResourceAllocationCommand,
) -> Targets:
    return (
        keys.related(keys.RESOURCE_ALLOCATION_PREFIX, "project", request.project_id),
    )


def invalidate_update_resource_allocation(
    request: UpdateResourceAllocationCommand | DeleteResourceAllocationCommand,
) -> Targets:
    return (keys.entity(keys.RESOURCE_ALLOCATION_PREFIX, request.id),)
