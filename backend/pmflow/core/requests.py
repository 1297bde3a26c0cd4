"""Requests — immutable operation descriptors routed through the pipeline.

Invariants:
    - Every request is a frozen dataclass; handlers never mutate their input
    - Command subclasses mutate state, Query subclasses only read it
    - Kind comes from the base class and is recorded by the registry at registration;
      nothing inspects type names at runtime
    - Paged queries clamp page >= 1 and 1 <= page_size <= 100

Design Decisions:
    - Dataclasses over pydantic here: requests are internal values, shape validation
      already happened at the API boundary and business rules run in the Validation stage
    - kw_only: request construction always names its fields, ordering never matters
"""

import asyncio
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from pmflow.core.domain_types import (
    AllocationType, DocumentType, IssueSeverity, IssueStatus, Priority,
    ProjectStatus, RiskLevel, RiskStatus, TaskStatus, TaskType,
    TimeEntryType, UserRole,
)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True, kw_only=True)
class Request:
    """Base for every pipeline request."""


@dataclass(frozen=True, kw_only=True)
class Command(Request):
    """Mutating request — runs inside exactly one transaction scope."""


@dataclass(frozen=True, kw_only=True)
class Query(Request):
    """Read-only request — never opens a transaction."""


@dataclass(frozen=True, kw_only=True)
class PagedQuery(Query):
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def effective_page(self) -> int:
        return max(self.page, 1)

    @property
    def effective_page_size(self) -> int:
        if self.page_size < 1:
            return DEFAULT_PAGE_SIZE
        return min(self.page_size, MAX_PAGE_SIZE)


class CancellationToken:
    """Cooperative cancellation signal carried by every request scope.

    Set by the caller (e.g. on client disconnect); observed by stages and
    handlers at their await points.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()


# ─── Organizations ───────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateOrganizationCommand(Command):
    name: str
    description: str | None = None
    website: str | None = None
    created_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class UpdateOrganizationCommand(Command):
    id: UUID
    name: str
    description: str | None = None
    website: str | None = None
    is_active: bool = True
    updated_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class DeleteOrganizationCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetOrganizationByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class ListOrganizationsQuery(PagedQuery):
    is_active: bool | None = None


# ─── Users ───────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateUserCommand(Command):
    email: str
    first_name: str
    last_name: str
    organization_id: UUID
    role: UserRole = UserRole.DEVELOPER
    phone_number: str | None = None
    created_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class UpdateUserCommand(Command):
    id: UUID
    first_name: str
    last_name: str
    role: UserRole
    phone_number: str | None = None
    is_active: bool = True
    updated_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class DeleteUserCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetUserByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetUserByEmailQuery(Query):
    email: str


@dataclass(frozen=True, kw_only=True)
class ListUsersQuery(PagedQuery):
    organization_id: UUID | None = None


# ─── Projects ────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateProjectCommand(Command):
    name: str
    code: str
    organization_id: UUID | None = None
    project_manager_id: UUID | None = None
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    start_date: date | None = None
    end_date: date | None = None
    budget_amount: float | None = None
    budget_currency: str | None = None
    created_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class UpdateProjectCommand(Command):
    id: UUID
    name: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    start_date: date | None = None
    end_date: date | None = None
    budget_amount: float | None = None
    budget_currency: str | None = None
    updated_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class ChangeProjectStatusCommand(Command):
    id: UUID
    status: ProjectStatus
    updated_by: str = "system"


@dataclass(frozen=True, kw_only=True)
class DeleteProjectCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetProjectByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetProjectByCodeQuery(Query):
    code: str


@dataclass(frozen=True, kw_only=True)
class ListProjectsQuery(PagedQuery):
    organization_id: UUID | None = None
    status: ProjectStatus | None = None


# ─── Sprints ─────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateSprintCommand(Command):
    project_id: UUID
    name: str
    sprint_number: int
    start_date: date
    end_date: date
    goal: str | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateSprintCommand(Command):
    id: UUID
    name: str
    start_date: date
    end_date: date
    goal: str | None = None


@dataclass(frozen=True, kw_only=True)
class StartSprintCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class CompleteSprintCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class DeleteSprintCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetSprintByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetSprintsByProjectQuery(Query):
    project_id: UUID


# ─── Tasks ───────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateTaskCommand(Command):
    project_id: UUID
    title: str
    code: str
    type: TaskType = TaskType.TASK
    priority: Priority = Priority.MEDIUM
    estimated_hours: float = 0.0
    description: str | None = None
    assigned_to_id: UUID | None = None
    sprint_id: UUID | None = None
    due_date: date | None = None
    story_points: int | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateTaskCommand(Command):
    id: UUID
    title: str
    status: TaskStatus
    priority: Priority
    estimated_hours: float = 0.0
    description: str | None = None
    assigned_to_id: UUID | None = None
    sprint_id: UUID | None = None
    due_date: date | None = None
    story_points: int | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteTaskCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetTaskByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetTasksByProjectQuery(PagedQuery):
    project_id: UUID
    status: TaskStatus | None = None


# ─── Time Entries ────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateTimeEntryCommand(Command):
    user_id: UUID
    task_id: UUID
    hours: float
    date: date
    type: TimeEntryType = TimeEntryType.DEVELOPMENT
    description: str | None = None
    is_billable: bool = True


@dataclass(frozen=True, kw_only=True)
class UpdateTimeEntryCommand(Command):
    id: UUID
    hours: float
    date: date
    type: TimeEntryType = TimeEntryType.DEVELOPMENT
    description: str | None = None
    is_billable: bool = True


@dataclass(frozen=True, kw_only=True)
class DeleteTimeEntryCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetTimeEntryByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetTimeEntriesByTaskQuery(Query):
    task_id: UUID


@dataclass(frozen=True, kw_only=True)
class GetTimeEntriesByUserQuery(Query):
    user_id: UUID
    start: date | None = None
    end: date | None = None


# ─── Risks ───────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateRiskCommand(Command):
    project_id: UUID
    title: str
    description: str
    level: RiskLevel = RiskLevel.MEDIUM
    probability: float = 0.0
    impact: float = 0.0
    owner_id: UUID | None = None
    mitigation_strategy: str | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateRiskCommand(Command):
    id: UUID
    title: str
    description: str
    level: RiskLevel
    status: RiskStatus
    probability: float = 0.0
    impact: float = 0.0
    owner_id: UUID | None = None
    mitigation_strategy: str | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteRiskCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetRiskByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetRisksByProjectQuery(Query):
    project_id: UUID


# ─── Issues ──────────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateIssueCommand(Command):
    project_id: UUID
    title: str
    description: str
    severity: IssueSeverity = IssueSeverity.MEDIUM
    reported_by_id: UUID | None = None
    assigned_to_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateIssueCommand(Command):
    id: UUID
    title: str
    description: str
    severity: IssueSeverity
    assigned_to_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class ResolveIssueCommand(Command):
    id: UUID
    resolution: str


@dataclass(frozen=True, kw_only=True)
class ChangeIssueStatusCommand(Command):
    id: UUID
    status: IssueStatus


@dataclass(frozen=True, kw_only=True)
class DeleteIssueCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetIssueByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetIssuesByProjectQuery(Query):
    project_id: UUID


# ─── Documents ───────────────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateDocumentCommand(Command):
    project_id: UUID
    name: str
    file_path: str
    file_size: int
    type: DocumentType = DocumentType.OTHER
    description: str | None = None
    content_type: str | None = None
    uploaded_by_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateDocumentCommand(Command):
    id: UUID
    name: str
    type: DocumentType
    description: str | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteDocumentCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetDocumentByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetDocumentsByProjectQuery(Query):
    project_id: UUID


# ─── Resource Allocations ────────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class CreateResourceAllocationCommand(Command):
    project_id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    type: AllocationType = AllocationType.FULL_TIME
    allocation_percentage: float = 100.0
    hourly_rate: float | None = None
    notes: str | None = None


@dataclass(frozen=True, kw_only=True)
class UpdateResourceAllocationCommand(Command):
    id: UUID
    start_date: date
    end_date: date
    type: AllocationType
    allocation_percentage: float
    hourly_rate: float | None = None
    notes: str | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteResourceAllocationCommand(Command):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetResourceAllocationByIdQuery(Query):
    id: UUID


@dataclass(frozen=True, kw_only=True)
class GetResourceAllocationsByProjectQuery(Query):
    project_id: UUID
