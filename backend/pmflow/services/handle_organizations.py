"""Organization & User Handlers — tenant and account commands/queries.

Invariants:
    - Delete is a soft delete: the row stays, is_active becomes False
    - User email is unique case-insensitively (stored lower-cased)
    - A user belongs to an existing organization
"""

import logging

from pydantic import TypeAdapter

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import CacheTTL
from pmflow.core.requests import (
    CreateOrganizationCommand, CreateUserCommand, DeleteOrganizationCommand,
    DeleteUserCommand, GetOrganizationByIdQuery, GetUserByEmailQuery, GetUserByIdQuery,
    ListOrganizationsQuery, ListUsersQuery, UpdateOrganizationCommand,
    UpdateUserCommand,
)
from pmflow.core.result import Result, Success, conflict, not_found
from pmflow.models.organization import Organization
from pmflow.models.user import User
from pmflow.schemas.organizations import OrganizationDto, UserDto
from pmflow.services.cached_read import cached_read
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)

_USER = TypeAdapter(UserDto)


class OrganizationHandlers(ScopedHandlers):
    async def create_organization(self, request: CreateOrganizationCommand) -> Result:
        org = Organization(
            id=new_id(),
            name=request.name.strip(),
            description=request.description,
            website=request.website,
            is_active=True,
            created_by=request.created_by,
            created_at=utcnow(),
        )
        await self.repo(Organization).add(org)
        await self.uow.save_changes()
        logger.info(f"Organization created: {org.id} ({org.name})")
        return Success(OrganizationDto.model_validate(org))

    async def update_organization(self, request: UpdateOrganizationCommand) -> Result:
        orgs = self.repo(Organization)
        org = await orgs.get_by_id(request.id)
        if org is None:
            return not_found("Organization", request.id)
        org.name = request.name.strip()
        org.description = request.description
        org.website = request.website
        org.is_active = request.is_active
        org.updated_by = request.updated_by
        org.updated_at = utcnow()
        await orgs.update(org)
        await self.uow.save_changes()
        return Success(OrganizationDto.model_validate(org))

    async def delete_organization(self, request: DeleteOrganizationCommand) -> Result:
        orgs = self.repo(Organization)
        org = await orgs.get_by_id(request.id)
        if org is None:
            return not_found("Organization", request.id)
        org.is_active = False
        org.updated_at = utcnow()
        await orgs.update(org)
        await self.uow.save_changes()
        logger.info(f"Organization deactivated: {org.id}")
        return Success(True)

    async def get_organization_by_id(self, request: GetOrganizationByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.ORGANIZATION_PREFIX, request.id),
            OrganizationDto, Organization, request.id, "Organization",
        )

    async def list_organizations(self, request: ListOrganizationsQuery) -> Result:
        page, size = request.effective_page, request.effective_page_size
        return await self.read_page(
            keys.entity_list(
                keys.ORGANIZATION_PREFIX, page, size,
                keys.filter_token(is_active=request.is_active),
            ),
            OrganizationDto, Organization, page, size,
            is_active=request.is_active,
        )


class UserHandlers(ScopedHandlers):
    async def create_user(self, request: CreateUserCommand) -> Result:
        users = self.repo(User)
        email = request.email.strip().lower()
        if await users.find_one(email=email) is not None:
            return conflict(f"User with email '{email}' already exists")
        if await self.repo(Organization).get_by_id(request.organization_id) is None:
            return not_found("Organization", request.organization_id)
        user = User(
            id=new_id(),
            organization_id=request.organization_id,
            email=email,
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            phone_number=request.phone_number,
            role=enum_value(request.role),
            is_active=True,
            created_by=request.created_by,
            created_at=utcnow(),
        )
        await users.add(user)
        await self.uow.save_changes()
        logger.info(f"User created: {user.id}")
        return Success(UserDto.model_validate(user))

    async def update_user(self, request: UpdateUserCommand) -> Result:
        users = self.repo(User)
        user = await users.get_by_id(request.id)
        if user is None:
            return not_found("User", request.id)
        user.first_name = request.first_name.strip()
        user.last_name = request.last_name.strip()
        user.role = enum_value(request.role)
        user.phone_number = request.phone_number
        user.is_active = request.is_active
        user.updated_by = request.updated_by
        user.updated_at = utcnow()
        await users.update(user)
        await self.uow.save_changes()
        self.touched(keys.user_by_email(user.email))
        return Success(UserDto.model_validate(user))

    async def delete_user(self, request: DeleteUserCommand) -> Result:
        users = self.repo(User)
        user = await users.get_by_id(request.id)
        if user is None:
            return not_found("User", request.id)
        user.is_active = False
        user.updated_at = utcnow()
        await users.update(user)
        await self.uow.save_changes()
        self.touched(keys.user_by_email(user.email))
        logger.info(f"User deactivated: {user.id}")
        return Success(True)

    async def get_user_by_id(self, request: GetUserByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.USER_PREFIX, request.id),
            UserDto, User, request.id, "User",
        )

    async def get_user_by_email(self, request: GetUserByEmailQuery) -> Result:
        email = request.email.strip().lower()

        async def load() -> UserDto | None:
            row = await self.repo(User).find_one(email=email)
            return UserDto.model_validate(row) if row is not None else None

        dto = await cached_read(
            self.cache, keys.user_by_email(email), CacheTTL.MEDIUM, _USER, load,
        )
        if dto is None:
            return not_found("User", email)
        return Success(dto)

    async def list_users(self, request: ListUsersQuery) -> Result:
        page, size = request.effective_page, request.effective_page_size
        return await self.read_page(
            keys.entity_list(
                keys.USER_PREFIX, page, size,
                keys.filter_token(organization_id=request.organization_id),
            ),
            UserDto, User, page, size,
            organization_id=request.organization_id,
        )
