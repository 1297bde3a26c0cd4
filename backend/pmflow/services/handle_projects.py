"""Project Handlers — project lifecycle commands and cached project reads.

Invariants:
    - Project code is unique across the system
    - Status changes follow PROJECT_TRANSITIONS (core/state_transitions.py)
    - Deleting a project removes its sprints, tasks, time entries, risks, issues,
      documents and allocations in the same transaction, and reports every cache
      key those rows could be cached under
    - The by-code key is reported on every mutation: the code is only known
      after the row is loaded

Design Decisions:
    - Children deleted explicitly rather than relying on ON DELETE CASCADE: the
      handler needs their ids for eviction anyway, and SQLite leaves FK
      enforcement off by default
"""

import logging

from pydantic import TypeAdapter

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import CacheTTL, ProjectStatus
from pmflow.core.requests import (
    ChangeProjectStatusCommand, CreateProjectCommand, DeleteProjectCommand,
    GetProjectByCodeQuery, GetProjectByIdQuery, ListProjectsQuery,
    UpdateProjectCommand,
)
from pmflow.core.result import Result, Success, conflict, not_found
from pmflow.core.state_transitions import check_project_transition
from pmflow.models.document import Document
from pmflow.models.issue import Issue
from pmflow.models.organization import Organization
from pmflow.models.project import Project
from pmflow.models.resource_allocation import ResourceAllocation
from pmflow.models.risk import Risk
from pmflow.models.sprint import Sprint
from pmflow.models.task import Task
from pmflow.models.time_entry import TimeEntry
from pmflow.schemas.projects import ProjectDto
from pmflow.services.cached_read import cached_read
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)

_PROJECT = TypeAdapter(ProjectDto)

# child model -> cache prefix; every row here is keyed by project_id
_PROJECT_CHILDREN = (
    (Sprint, keys.SPRINT_PREFIX),
    (Risk, keys.RISK_PREFIX),
    (Issue, keys.ISSUE_PREFIX),
    (Document, keys.DOCUMENT_PREFIX),
    (ResourceAllocation, keys.RESOURCE_ALLOCATION_PREFIX),
)


class ProjectHandlers(ScopedHandlers):
    async def create_project(self, request: CreateProjectCommand) -> Result:
        projects = self.repo(Project)
        if await projects.find_one(code=request.code) is not None:
            logger.warning(f"Project creation failed: code {request.code} already exists")
            return conflict(f"Project with code '{request.code}' already exists")
        if request.organization_id is not None:
            if await self.repo(Organization).get_by_id(request.organization_id) is None:
                return not_found("Organization", request.organization_id)

        project = Project(
            id=new_id(),
            organization_id=request.organization_id,
            project_manager_id=request.project_manager_id,
            name=request.name.strip(),
            code=request.code,
            description=request.description,
            status=ProjectStatus.PLANNING.value,
            priority=enum_value(request.priority),
            start_date=request.start_date,
            end_date=request.end_date,
            budget_amount=request.budget_amount or 0.0,
            budget_currency=request.budget_currency or "USD",
            progress_percentage=0.0,
            created_by=request.created_by,
            created_at=utcnow(),
        )
        await projects.add(project)
        await self.uow.save_changes()
        logger.info(f"Project created: {project.id} - {project.name} ({project.code})")
        return Success(ProjectDto.model_validate(project))

    async def update_project(self, request: UpdateProjectCommand) -> Result:
        projects = self.repo(Project)
        project = await projects.get_by_id(request.id)
        if project is None:
            return not_found("Project", request.id)
        project.name = request.name.strip()
        project.description = request.description
        project.priority = enum_value(request.priority)
        project.start_date = request.start_date
        project.end_date = request.end_date
        if request.budget_amount is not None:
            project.budget_amount = request.budget_amount
        if request.budget_currency is not None:
            project.budget_currency = request.budget_currency
        project.updated_by = request.updated_by
        project.updated_at = utcnow()
        await projects.update(project)
        await self.uow.save_changes()
        self.touched(keys.project_by_code(project.code))
        return Success(ProjectDto.model_validate(project))

    async def change_project_status(self, request: ChangeProjectStatusCommand) -> Result:
        projects = self.repo(Project)
        project = await projects.get_by_id(request.id)
        if project is None:
            return not_found("Project", request.id)
        target = ProjectStatus(enum_value(request.status))
        error = check_project_transition(ProjectStatus(project.status), target)
        if error:
            return conflict(error)
        if target.value != project.status:
            logger.info(f"Project {project.id} status {project.status} -> {target.value}")
            project.status = target.value
            if target == ProjectStatus.COMPLETED:
                project.progress_percentage = 100.0
            project.updated_by = request.updated_by
            project.updated_at = utcnow()
            await projects.update(project)
            await self.uow.save_changes()
        self.touched(keys.project_by_code(project.code))
        return Success(ProjectDto.model_validate(project))

    async def delete_project(self, request: DeleteProjectCommand) -> Result:
        projects = self.repo(Project)
        project = await projects.get_by_id(request.id)
        if project is None:
            return not_found("Project", request.id)

        await self._remove_tasks(project.id)
        for model, prefix in _PROJECT_CHILDREN:
            repo = self.repo(model)
            for child in await repo.find(project_id=project.id):
                self.touched(keys.entity(prefix, child.id))
                await repo.remove(child)
            self.touched(keys.related(prefix, "project", project.id))

        await projects.remove(project)
        await self.uow.save_changes()
        self.touched(keys.project_by_code(project.code))
        logger.info(f"Project deleted: {project.id} ({project.code})")
        return Success(True)

    async def _remove_tasks(self, project_id) -> None:
        tasks, entries = self.repo(Task), self.repo(TimeEntry)
        for task in await tasks.find(project_id=project_id):
            for entry in await entries.find(task_id=task.id):
                self.touched(
                    keys.entity(keys.TIME_ENTRY_PREFIX, entry.id),
                    keys.pattern(keys.TIME_ENTRY_PREFIX, "user", entry.user_id),
                )
                await entries.remove(entry)
            self.touched(
                keys.entity(keys.TASK_PREFIX, task.id),
                keys.related(keys.TIME_ENTRY_PREFIX, "task", task.id),
            )
            await tasks.remove(task)
        self.touched(keys.pattern(keys.TASK_PREFIX, "project", project_id))

    # ─── Queries ─────────────────────────────────────────────────

    async def get_project_by_id(self, request: GetProjectByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.PROJECT_PREFIX, request.id),
            ProjectDto, Project, request.id, "Project",
        )

    async def get_project_by_code(self, request: GetProjectByCodeQuery) -> Result:
        async def load() -> ProjectDto | None:
            row = await self.repo(Project).find_one(code=request.code)
            return ProjectDto.model_validate(row) if row is not None else None

        dto = await cached_read(
            self.cache, keys.project_by_code(request.code), CacheTTL.MEDIUM,
            _PROJECT, load,
        )
        if dto is None:
            return not_found("Project", request.code)
        return Success(dto)

    async def list_projects(self, request: ListProjectsQuery) -> Result:
        page, size = request.effective_page, request.effective_page_size
        return await self.read_page(
            keys.entity_list(
                keys.PROJECT_PREFIX, page, size,
                keys.filter_token(
                    organization_id=request.organization_id, status=request.status,
                ),
            ),
            ProjectDto, Project, page, size,
            organization_id=request.organization_id, status=request.status,
        )
