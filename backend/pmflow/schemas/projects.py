"""Project, Sprint & Task Schemas — read DTOs and API request bodies."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from pmflow.core.domain_types import (
    Priority, ProjectStatus, SprintStatus, TaskStatus, TaskType,
)


# ─── Projects ────────────────────────────────────────────────────

class ProjectDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    code: str
    description: str | None = None
    status: ProjectStatus
    priority: Priority
    start_date: date | None = None
    end_date: date | None = None
    budget_amount: float
    budget_currency: str
    progress_percentage: float = 0.0
    organization_id: UUID | None = None
    project_manager_id: UUID | None = None
    created_at: datetime
    created_by: str


class ProjectCreate(BaseModel):
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


class ProjectUpdate(BaseModel):
    name: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    start_date: date | None = None
    end_date: date | None = None
    budget_amount: float | None = None
    budget_currency: str | None = None


class ProjectStatusChange(BaseModel):
    status: ProjectStatus


# ─── Sprints ─────────────────────────────────────────────────────

class SprintDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    name: str
    goal: str | None = None
    sprint_number: int
    status: SprintStatus
    start_date: date
    end_date: date
    completed_at: datetime | None = None
    created_at: datetime


class SprintCreate(BaseModel):
    project_id: UUID
    name: str
    sprint_number: int
    start_date: date
    end_date: date
    goal: str | None = None


class SprintUpdate(BaseModel):
    name: str
    start_date: date
    end_date: date
    goal: str | None = None


# ─── Tasks ───────────────────────────────────────────────────────

class TaskDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    sprint_id: UUID | None = None
    assigned_to_id: UUID | None = None
    title: str
    code: str
    description: str | None = None
    type: TaskType
    status: TaskStatus
    priority: Priority
    estimated_hours: float
    story_points: int | None = None
    due_date: date | None = None
    completed_at: datetime | None = None
    created_at: datetime


class TaskCreate(BaseModel):
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


class TaskUpdate(BaseModel):
    title: str
    status: TaskStatus
    priority: Priority
    estimated_hours: float = 0.0
    description: str | None = None
    assigned_to_id: UUID | None = None
    sprint_id: UUID | None = None
    due_date: date | None = None
    story_points: int | None = None
