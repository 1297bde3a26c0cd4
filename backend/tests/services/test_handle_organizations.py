"""Organization and user handlers — soft deletes, email uniqueness, cached reads."""

from uuid import uuid4

import pytest

from pmflow.core import cache_keys as keys
from pmflow.core import requests as rq
from pmflow.core.result import FailureKind
from pmflow.models.organization import Organization
from pmflow.models.user import User


@pytest.fixture
async def org(dispatcher):
    return (await dispatcher.execute(rq.CreateOrganizationCommand(name=" Acme "))).value


async def test_create_organization_trims_name(org):
    assert org.name == "Acme"
    assert org.is_active


async def test_delete_organization_is_soft(dispatcher, org, store):
    result = await dispatcher.execute(rq.DeleteOrganizationCommand(id=org.id))
    assert result.is_success
    assert store.count(Organization) == 1
    assert store.get(Organization, org.id)["is_active"] is False


async def test_list_organizations_filters_active(dispatcher, org):
    await dispatcher.execute(rq.CreateOrganizationCommand(name="Other"))
    await dispatcher.execute(rq.DeleteOrganizationCommand(id=org.id))
    active = await dispatcher.execute(rq.ListOrganizationsQuery(is_active=True))
    assert [o.name for o in active.value.items] == ["Other"]


async def test_user_email_is_lower_cased_and_unique(dispatcher, org):
    first = await dispatcher.execute(rq.CreateUserCommand(
        email="Ana@Acme.io", first_name="Ana", last_name="Lima", organization_id=org.id,
    ))
    assert first.value.email == "ana@acme.io"
    assert first.value.full_name == "Ana Lima"

    again = await dispatcher.execute(rq.CreateUserCommand(
        email="ANA@acme.io", first_name="A", last_name="L", organization_id=org.id,
    ))
    assert again.kind is FailureKind.CONFLICT


async def test_user_requires_existing_organization(dispatcher, store):
    result = await dispatcher.execute(rq.CreateUserCommand(
        email="x@y.io", first_name="X", last_name="Y", organization_id=uuid4(),
    ))
    assert result.kind is FailureKind.NOT_FOUND
    assert store.count(User) == 0


async def test_invalid_user_reports_every_rule(dispatcher):
    result = await dispatcher.execute(rq.CreateUserCommand(
        email="nope", first_name="", last_name="", organization_id=uuid4(),
    ))
    assert result.kind is FailureKind.VALIDATION
    assert set(result.errors) == {
        "Email must be a valid email address",
        "First name is required",
        "Last name is required",
    }


async def test_user_update_evicts_entity_and_email_keys(dispatcher, org, cache):
    user = (await dispatcher.execute(rq.CreateUserCommand(
        email="ana@acme.io", first_name="Ana", last_name="Lima", organization_id=org.id,
    ))).value
    await dispatcher.execute(rq.GetUserByIdQuery(id=user.id))
    await dispatcher.execute(rq.GetUserByEmailQuery(email="ana@acme.io"))
    assert await cache.get(keys.user_by_email("ana@acme.io")) is not None

    await dispatcher.execute(rq.UpdateUserCommand(
        id=user.id, first_name="Ana", last_name="Souza", role=user.role,
    ))

    assert await cache.get(keys.entity(keys.USER_PREFIX, user.id)) is None
    assert await cache.get(keys.user_by_email("ana@acme.io")) is None
    fresh = await dispatcher.execute(rq.GetUserByIdQuery(id=user.id))
    assert fresh.value.last_name == "Souza"
    by_email = await dispatcher.execute(rq.GetUserByEmailQuery(email="ana@acme.io"))
    assert by_email.value.last_name == "Souza"


async def test_user_lookup_by_email_ignores_case(dispatcher, org):
    user = (await dispatcher.execute(rq.CreateUserCommand(
        email="bia@acme.io", first_name="Bia", last_name="Reis", organization_id=org.id,
    ))).value

    found = await dispatcher.execute(rq.GetUserByEmailQuery(email=" Bia@ACME.io "))
    missing = await dispatcher.execute(rq.GetUserByEmailQuery(email="nobody@acme.io"))

    assert found.value.id == user.id
    assert missing.kind is FailureKind.NOT_FOUND
