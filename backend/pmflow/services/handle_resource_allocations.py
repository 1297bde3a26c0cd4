"""Resource Allocation Handlers — assigning user capacity to projects."""

from pmflow.core import cache_keys as keys
from pmflow.core.requests import (
    CreateResourceAllocationCommand, DeleteResourceAllocationCommand,
    GetResourceAllocationByIdQuery, GetResourceAllocationsByProjectQuery,
    UpdateResourceAllocationCommand,
)
from pmflow.core.result import Result, Success, not_found
from pmflow.models.project import Project
from pmflow.models.resource_allocation import ResourceAllocation
from pmflow.models.user import User
from pmflow.schemas.project_items import ResourceAllocationDto
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)


class ResourceAllocationHandlers(ScopedHandlers):
    async def create_resource_allocation(
        self, request: CreateResourceAllocationCommand,
    ) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        if await self.repo(User).get_by_id(request.user_id) is None:
            return not_found("User", request.user_id)
        allocation = ResourceAllocation(
            id=new_id(),
            project_id=request.project_id,
            user_id=request.user_id,
            type=enum_value(request.type),
            allocation_percentage=request.allocation_percentage,
            start_date=request.start_date,
            end_date=request.end_date,
            hourly_rate=request.hourly_rate,
            notes=request.notes,
            created_at=utcnow(),
        )
        await self.repo(ResourceAllocation).add(allocation)
        await self.uow.save_changes()
        return Success(ResourceAllocationDto.model_validate(allocation))

    async def update_resource_allocation(
        self, request: UpdateResourceAllocationCommand,
    ) -> Result:
        allocations = self.repo(ResourceAllocation)
        allocation = await allocations.get_by_id(request.id)
        if allocation is None:
            return not_found("Resource allocation", request.id)
        allocation.start_date = request.start_date
        allocation.end_date = request.end_date
        allocation.type = enum_value(request.type)
        allocation.allocation_percentage = request.allocation_percentage
        allocation.hourly_rate = request.hourly_rate
        allocation.notes = request.notes
        allocation.updated_at = utcnow()
        await allocations.update(allocation)
        await self.uow.save_changes()
        self.touched(keys.related(
            keys.RESOURCE_ALLOCATION_PREFIX, "project", allocation.project_id,
        ))
        return Success(ResourceAllocationDto.model_validate(allocation))

    async def delete_resource_allocation(
        self, request: DeleteResourceAllocationCommand,
    ) -> Result:
        allocations = self.repo(ResourceAllocation)
        allocation = await allocations.get_by_id(request.id)
        if allocation is None:
            return not_found("Resource allocation", request.id)
        await allocations.remove(allocation)
        await self.uow.save_changes()
        self.touched(keys.related(
            keys.RESOURCE_ALLOCATION_PREFIX, "project", allocation.project_id,
        ))
        return Success(True)

    async def get_resource_allocation_by_id(
        self, request: GetResourceAllocationByIdQuery,
    ) -> Result:
        return await self.read_entity(
            keys.entity(keys.RESOURCE_ALLOCATION_PREFIX, request.id),
            ResourceAllocationDto, ResourceAllocation, request.id,
            "Resource allocation",
        )

    async def get_resource_allocations_by_project(
        self, request: GetResourceAllocationsByProjectQuery,
    ) -> Result:
        return await self.read_list(
            keys.related(keys.RESOURCE_ALLOCATION_PREFIX, "project", request.project_id),
            ResourceAllocationDto, ResourceAllocation, project_id=request.project_id,
        )
