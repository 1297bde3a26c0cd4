"""Project Item Schemas — risks, issues, documents and resource allocations."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

from pmflow.core.domain_types import (
    AllocationType, DocumentType, IssueSeverity, IssueStatus, RiskLevel, RiskStatus,
)


# ─── Risks ───────────────────────────────────────────────────────

class RiskDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    owner_id: UUID | None = None
    title: str
    description: str
    level: RiskLevel
    status: RiskStatus
    probability: float
    impact: float
    mitigation_strategy: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime

    @computed_field
    @property
    def score(self) -> float:
        """Probability x impact on a 0-100 scale."""
        return round(self.probability * self.impact / 100, 2)


class RiskCreate(BaseModel):
    project_id: UUID
    title: str
    description: str
    level: RiskLevel = RiskLevel.MEDIUM
    probability: float = 0.0
    impact: float = 0.0
    owner_id: UUID | None = None
    mitigation_strategy: str | None = None


class RiskUpdate(BaseModel):
    title: str
    description: str
    level: RiskLevel
    status: RiskStatus
    probability: float = 0.0
    impact: float = 0.0
    owner_id: UUID | None = None
    mitigation_strategy: str | None = None


# ─── Issues ──────────────────────────────────────────────────────

class IssueDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    reported_by_id: UUID | None = None
    assigned_to_id: UUID | None = None
    title: str
    description: str
    severity: IssueSeverity
    status: IssueStatus
    resolution: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime


class IssueCreate(BaseModel):
    project_id: UUID
    title: str
    description: str
    severity: IssueSeverity = IssueSeverity.MEDIUM
    reported_by_id: UUID | None = None
    assigned_to_id: UUID | None = None


class IssueUpdate(BaseModel):
    title: str
    description: str
    severity: IssueSeverity
    assigned_to_id: UUID | None = None


class IssueResolve(BaseModel):
    resolution: str


class IssueStatusChange(BaseModel):
    status: IssueStatus


# ─── Documents ───────────────────────────────────────────────────

class DocumentDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    uploaded_by_id: UUID | None = None
    name: str
    description: str | None = None
    type: DocumentType
    file_path: str
    file_size: int
    content_type: str | None = None
    version: int
    created_at: datetime


class DocumentCreate(BaseModel):
    project_id: UUID
    name: str
    file_path: str
    file_size: int
    type: DocumentType = DocumentType.OTHER
    description: str | None = None
    content_type: str | None = None
    uploaded_by_id: UUID | None = None


class DocumentUpdate(BaseModel):
    name: str
    type: DocumentType
    description: str | None = None


# ─── Resource Allocations ────────────────────────────────────────

class ResourceAllocationDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    user_id: UUID
    type: AllocationType
    allocation_percentage: float
    start_date: date
    end_date: date
    hourly_rate: float | None = None
    notes: str | None = None
    created_at: datetime


class ResourceAllocationCreate(BaseModel):
    project_id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    type: AllocationType = AllocationType.FULL_TIME
    allocation_percentage: float = 100.0
    hourly_rate: float | None = None
    notes: str | None = None


class ResourceAllocationUpdate(BaseModel):
    start_date: date
    end_date: date
    type: AllocationType
    allocation_percentage: float
    hourly_rate: float | None = None
    notes: str | None = None
