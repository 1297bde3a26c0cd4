"""Organization & User Schemas — read DTOs and API request bodies.

Invariants:
    - DTOs build from ORM rows (from_attributes) and round-trip through the cache as JSON
    - Bodies only check shape; business rules run in the pipeline's Validation stage
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

from pmflow.core.domain_types import UserRole


class OrganizationDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    website: str | None = None
    is_active: bool
    created_at: datetime
    created_by: str


class OrganizationCreate(BaseModel):
    name: str
    description: str | None = None
    website: str | None = None


class OrganizationUpdate(OrganizationCreate):
    is_active: bool = True


class UserDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    email: str
    first_name: str
    last_name: str
    phone_number: str | None = None
    role: UserRole
    is_active: bool
    created_at: datetime

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserCreate(BaseModel):
    email: str
    first_name: str
    last_name: str
    organization_id: UUID
    role: UserRole = UserRole.DEVELOPER
    phone_number: str | None = None


class UserUpdate(BaseModel):
    first_name: str
    last_name: str
    role: UserRole
    phone_number: str | None = None
    is_active: bool = True
