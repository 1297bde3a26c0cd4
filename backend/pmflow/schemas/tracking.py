"""Time Tracking Schemas — time entry DTOs, per-task totals, and request bodies.

Invariants:
    - TimeEntryDto.date reads the ORM's work_date column attribute
    - TaskTimeEntries.total_hours is the sum of its entries' hours
"""

import datetime as dt
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from pmflow.core.domain_types import TimeEntryType


class TimeEntryDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    task_id: UUID
    user_id: UUID
    hours: float
    type: TimeEntryType
    date: dt.date = Field(validation_alias=AliasChoices("date", "work_date"))
    description: str | None = None
    is_billable: bool
    created_at: dt.datetime


class TaskTimeEntries(BaseModel):
    task_id: UUID
    total_hours: float
    entries: list[TimeEntryDto]


class TimeEntryCreate(BaseModel):
    user_id: UUID
    task_id: UUID
    hours: float
    date: dt.date
    type: TimeEntryType = TimeEntryType.DEVELOPMENT
    description: str | None = None
    is_billable: bool = True


class TimeEntryUpdate(BaseModel):
    hours: float
    date: dt.date
    type: TimeEntryType = TimeEntryType.DEVELOPMENT
    description: str | None = None
    is_billable: bool = True
