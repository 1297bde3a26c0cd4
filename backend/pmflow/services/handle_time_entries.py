"""Time Entry Handlers — logging hours against tasks, per-task and per-user reads.

Invariants:
    - An entry references an existing task and an existing user
    - Hours logged on a task are always the sum of its entries (no stored counter,
      so concurrent entries never lose an update)
    - By-user reads are keyed by the requested date window
"""

import logging

from pydantic import TypeAdapter

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import CacheTTL
from pmflow.core.requests import (
    CreateTimeEntryCommand, DeleteTimeEntryCommand, GetTimeEntriesByTaskQuery,
    GetTimeEntriesByUserQuery, GetTimeEntryByIdQuery, UpdateTimeEntryCommand,
)
from pmflow.core.result import Result, Success, not_found
from pmflow.models.task import Task
from pmflow.models.time_entry import TimeEntry
from pmflow.models.user import User
from pmflow.schemas.tracking import TaskTimeEntries, TimeEntryDto
from pmflow.services.cached_read import cached_read
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)

_TASK_ENTRIES = TypeAdapter(TaskTimeEntries)
_ENTRY_LIST = TypeAdapter(list[TimeEntryDto])


class TimeEntryHandlers(ScopedHandlers):
    async def create_time_entry(self, request: CreateTimeEntryCommand) -> Result:
        if await self.repo(Task).get_by_id(request.task_id) is None:
            return not_found("Task", request.task_id)
        if await self.repo(User).get_by_id(request.user_id) is None:
            return not_found("User", request.user_id)
        entry = TimeEntry(
            id=new_id(),
            task_id=request.task_id,
            user_id=request.user_id,
            hours=request.hours,
            type=enum_value(request.type),
            work_date=request.date,
            description=request.description,
            is_billable=request.is_billable,
            created_at=utcnow(),
        )
        await self.repo(TimeEntry).add(entry)
        await self.uow.save_changes()
        logger.info(f"Logged {entry.hours}h on task {entry.task_id}")
        return Success(TimeEntryDto.model_validate(entry))

    async def update_time_entry(self, request: UpdateTimeEntryCommand) -> Result:
        entries = self.repo(TimeEntry)
        entry = await entries.get_by_id(request.id)
        if entry is None:
            return not_found("Time entry", request.id)
        entry.hours = request.hours
        entry.work_date = request.date
        entry.type = enum_value(request.type)
        entry.description = request.description
        entry.is_billable = request.is_billable
        entry.updated_at = utcnow()
        await entries.update(entry)
        await self.uow.save_changes()
        self._touch_relations(entry)
        return Success(TimeEntryDto.model_validate(entry))

    async def delete_time_entry(self, request: DeleteTimeEntryCommand) -> Result:
        entries = self.repo(TimeEntry)
        entry = await entries.get_by_id(request.id)
        if entry is None:
            return not_found("Time entry", request.id)
        await entries.remove(entry)
        await self.uow.save_changes()
        self._touch_relations(entry)
        return Success(True)

    def _touch_relations(self, entry: TimeEntry) -> None:
        self.touched(
            keys.related(keys.TIME_ENTRY_PREFIX, "task", entry.task_id),
            keys.pattern(keys.TIME_ENTRY_PREFIX, "user", entry.user_id),
        )

    # ─── Queries ─────────────────────────────────────────────────

    async def get_time_entry_by_id(self, request: GetTimeEntryByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.TIME_ENTRY_PREFIX, request.id),
            TimeEntryDto, TimeEntry, request.id, "Time entry",
        )

    async def get_time_entries_by_task(self, request: GetTimeEntriesByTaskQuery) -> Result:
        async def load() -> TaskTimeEntries:
            rows = await self.repo(TimeEntry).find(task_id=request.task_id)
            rows = sorted(rows, key=lambda e: (e.work_date, e.created_at), reverse=True)
            return TaskTimeEntries(
                task_id=request.task_id,
                total_hours=round(sum(e.hours for e in rows), 2),
                entries=[TimeEntryDto.model_validate(e) for e in rows],
            )

        value = await cached_read(
            self.cache, keys.related(keys.TIME_ENTRY_PREFIX, "task", request.task_id),
            CacheTTL.SHORT, _TASK_ENTRIES, load,
        )
        return Success(value)

    async def get_time_entries_by_user(self, request: GetTimeEntriesByUserQuery) -> Result:
        async def load() -> list[TimeEntryDto]:
            rows = await self.repo(TimeEntry).find(user_id=request.user_id)
            rows = [
                e for e in rows
                if (request.start is None or e.work_date >= request.start)
                and (request.end is None or e.work_date <= request.end)
            ]
            rows.sort(key=lambda e: (e.work_date, e.created_at), reverse=True)
            return [TimeEntryDto.model_validate(e) for e in rows]

        value = await cached_read(
            self.cache,
            keys.time_entries_by_user(request.user_id, request.start, request.end),
            CacheTTL.SHORT, _ENTRY_LIST, load,
        )
        return Success(value)
