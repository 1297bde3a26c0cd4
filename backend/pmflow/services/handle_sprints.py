"""Sprint Handlers — sprint planning, start/complete lifecycle, cached reads.

Invariants:
    - Sprint numbers are unique within a project
    - Only planned sprints start (and not before their start date); only active
      sprints complete; completed sprints are read-only
    - Deleting a sprint detaches its tasks (sprint_id cleared), it never deletes them
"""

import logging

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import SprintStatus
from pmflow.core.requests import (
    CompleteSprintCommand, CreateSprintCommand, DeleteSprintCommand,
    GetSprintByIdQuery, GetSprintsByProjectQuery, StartSprintCommand,
    UpdateSprintCommand,
)
from pmflow.core.result import Result, Success, conflict, not_found
from pmflow.core.state_transitions import (
    check_sprint_complete, check_sprint_start, check_sprint_update,
)
from pmflow.models.project import Project
from pmflow.models.sprint import Sprint
from pmflow.models.task import Task
from pmflow.schemas.projects import SprintDto
from pmflow.services.handler_support import ScopedHandlers, new_id, today, utcnow

logger = logging.getLogger(__name__)


class SprintHandlers(ScopedHandlers):
    async def create_sprint(self, request: CreateSprintCommand) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        sprints = self.repo(Sprint)
        duplicate = await sprints.find_one(
            project_id=request.project_id, sprint_number=request.sprint_number,
        )
        if duplicate is not None:
            return conflict(
                f"Sprint {request.sprint_number} already exists in this project",
            )
        sprint = Sprint(
            id=new_id(),
            project_id=request.project_id,
            name=request.name.strip(),
            goal=request.goal,
            sprint_number=request.sprint_number,
            status=SprintStatus.PLANNED.value,
            start_date=request.start_date,
            end_date=request.end_date,
            created_at=utcnow(),
        )
        await sprints.add(sprint)
        await self.uow.save_changes()
        return Success(SprintDto.model_validate(sprint))

    async def update_sprint(self, request: UpdateSprintCommand) -> Result:
        sprints = self.repo(Sprint)
        sprint = await sprints.get_by_id(request.id)
        if sprint is None:
            return not_found("Sprint", request.id)
        error = check_sprint_update(SprintStatus(sprint.status))
        if error:
            return conflict(error)
        sprint.name = request.name.strip()
        sprint.goal = request.goal
        sprint.start_date = request.start_date
        sprint.end_date = request.end_date
        sprint.updated_at = utcnow()
        await sprints.update(sprint)
        await self.uow.save_changes()
        self.touched(keys.related(keys.SPRINT_PREFIX, "project", sprint.project_id))
        return Success(SprintDto.model_validate(sprint))

    async def start_sprint(self, request: StartSprintCommand) -> Result:
        sprints = self.repo(Sprint)
        sprint = await sprints.get_by_id(request.id)
        if sprint is None:
            return not_found("Sprint", request.id)
        error = check_sprint_start(SprintStatus(sprint.status), sprint.start_date, today())
        if error:
            return conflict(error)
        sprint.status = SprintStatus.ACTIVE.value
        sprint.updated_at = utcnow()
        await sprints.update(sprint)
        await self.uow.save_changes()
        self.touched(keys.related(keys.SPRINT_PREFIX, "project", sprint.project_id))
        logger.info(f"Sprint started: {sprint.id}")
        return Success(SprintDto.model_validate(sprint))

    async def complete_sprint(self, request: CompleteSprintCommand) -> Result:
        sprints = self.repo(Sprint)
        sprint = await sprints.get_by_id(request.id)
        if sprint is None:
            return not_found("Sprint", request.id)
        error = check_sprint_complete(SprintStatus(sprint.status))
        if error:
            return conflict(error)
        sprint.status = SprintStatus.COMPLETED.value
        sprint.completed_at = utcnow()
        sprint.updated_at = sprint.completed_at
        await sprints.update(sprint)
        await self.uow.save_changes()
        self.touched(keys.related(keys.SPRINT_PREFIX, "project", sprint.project_id))
        logger.info(f"Sprint completed: {sprint.id}")
        return Success(SprintDto.model_validate(sprint))

    async def delete_sprint(self, request: DeleteSprintCommand) -> Result:
        sprints = self.repo(Sprint)
        sprint = await sprints.get_by_id(request.id)
        if sprint is None:
            return not_found("Sprint", request.id)
        tasks = self.repo(Task)
        for task in await tasks.find(sprint_id=sprint.id):
            task.sprint_id = None
            task.updated_at = utcnow()
            await tasks.update(task)
            self.touched(keys.entity(keys.TASK_PREFIX, task.id))
        await sprints.remove(sprint)
        await self.uow.save_changes()
        self.touched(
            keys.related(keys.SPRINT_PREFIX, "project", sprint.project_id),
            keys.pattern(keys.TASK_PREFIX, "project", sprint.project_id),
        )
        return Success(True)

    async def get_sprint_by_id(self, request: GetSprintByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.SPRINT_PREFIX, request.id),
            SprintDto, Sprint, request.id, "Sprint",
        )

    async def get_sprints_by_project(self, request: GetSprintsByProjectQuery) -> Result:
        result = await self.read_list(
            keys.related(keys.SPRINT_PREFIX, "project", request.project_id),
            SprintDto, Sprint, project_id=request.project_id,
        )
        return Success(sorted(result.value, key=lambda s: s.sprint_number))
