"""Task Handlers — task commands and paged, cached task reads.

Invariants:
    - Task code is unique within its project
    - A task's sprint, when set, belongs to the same project
    - completed_at is stamped on entering DONE and cleared on leaving it
    - Deleting a task deletes its time entries
"""

import logging

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import TaskStatus
from pmflow.core.requests import (
    CreateTaskCommand, DeleteTaskCommand, GetTaskByIdQuery,
    GetTasksByProjectQuery, UpdateTaskCommand,
)
from pmflow.core.result import Result, Success, conflict, not_found
from pmflow.core.state_transitions import task_is_done
from pmflow.models.project import Project
from pmflow.models.sprint import Sprint
from pmflow.models.task import Task
from pmflow.models.time_entry import TimeEntry
from pmflow.schemas.projects import TaskDto
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)


class TaskHandlers(ScopedHandlers):
    async def create_task(self, request: CreateTaskCommand) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        tasks = self.repo(Task)
        if await tasks.find_one(project_id=request.project_id, code=request.code):
            return conflict(f"Task with code '{request.code}' already exists in this project")
        failure = await self._check_sprint(request.sprint_id, request.project_id)
        if failure:
            return failure

        task = Task(
            id=new_id(),
            project_id=request.project_id,
            sprint_id=request.sprint_id,
            assigned_to_id=request.assigned_to_id,
            title=request.title.strip(),
            code=request.code,
            description=request.description,
            type=enum_value(request.type),
            status=TaskStatus.BACKLOG.value,
            priority=enum_value(request.priority),
            estimated_hours=request.estimated_hours,
            story_points=request.story_points,
            due_date=request.due_date,
            created_at=utcnow(),
        )
        await tasks.add(task)
        await self.uow.save_changes()
        logger.info(f"Task created: {task.id} ({task.code})")
        return Success(TaskDto.model_validate(task))

    async def update_task(self, request: UpdateTaskCommand) -> Result:
        tasks = self.repo(Task)
        task = await tasks.get_by_id(request.id)
        if task is None:
            return not_found("Task", request.id)
        failure = await self._check_sprint(request.sprint_id, task.project_id)
        if failure:
            return failure

        status = TaskStatus(enum_value(request.status))
        if task_is_done(status) and task.status != status.value:
            task.completed_at = utcnow()
        elif not task_is_done(status):
            task.completed_at = None
        task.status = status.value
        task.title = request.title.strip()
        task.priority = enum_value(request.priority)
        task.estimated_hours = request.estimated_hours
        task.description = request.description
        task.assigned_to_id = request.assigned_to_id
        task.sprint_id = request.sprint_id
        task.due_date = request.due_date
        task.story_points = request.story_points
        task.updated_at = utcnow()
        await tasks.update(task)
        await self.uow.save_changes()
        self.touched(keys.pattern(keys.TASK_PREFIX, "project", task.project_id))
        return Success(TaskDto.model_validate(task))

    async def delete_task(self, request: DeleteTaskCommand) -> Result:
        tasks = self.repo(Task)
        task = await tasks.get_by_id(request.id)
        if task is None:
            return not_found("Task", request.id)
        entries = self.repo(TimeEntry)
        for entry in await entries.find(task_id=task.id):
            self.touched(
                keys.entity(keys.TIME_ENTRY_PREFIX, entry.id),
                keys.pattern(keys.TIME_ENTRY_PREFIX, "user", entry.user_id),
            )
            await entries.remove(entry)
        await tasks.remove(task)
        await self.uow.save_changes()
        self.touched(
            keys.pattern(keys.TASK_PREFIX, "project", task.project_id),
            keys.related(keys.TIME_ENTRY_PREFIX, "task", task.id),
        )
        return Success(True)

    async def _check_sprint(self, sprint_id, project_id):
        if sprint_id is None:
            return None
        sprint = await self.repo(Sprint).get_by_id(sprint_id)
        if sprint is None:
            return not_found("Sprint", sprint_id)
        if sprint.project_id != project_id:
            return conflict("Sprint belongs to a different project")
        return None

    async def get_task_by_id(self, request: GetTaskByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.TASK_PREFIX, request.id),
            TaskDto, Task, request.id, "Task",
        )

    async def get_tasks_by_project(self, request: GetTasksByProjectQuery) -> Result:
        page, size = request.effective_page, request.effective_page_size
        return await self.read_page(
            keys.tasks_by_project(
                request.project_id, page, size,
                keys.filter_token(status=request.status),
            ),
            TaskDto, Task, page, size,
            project_id=request.project_id, status=request.status,
        )
