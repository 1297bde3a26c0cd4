"""REST surface — status codes and envelopes produced by routes and error handlers.

Tests cover:
    - Creates answer 201, deletes 204, reads 200
    - Business failures map to 400 / 404 / 409 with the Failure envelope
    - Malformed bodies get the same 400 envelope as rule violations
    - Faults escaping the pipeline use the fault envelope and their own status
"""

from uuid import uuid4

from pmflow.models.project import Project


async def _create_project(client, code="APL", name="Apollo"):
    return await client.post("/api/v1/projects", json={"name": name, "code": code})


async def test_create_project_returns_201(client, store):
    response = await _create_project(client)
    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "APL"
    assert body["status"] == "planning"
    assert store.count(Project) == 1


async def test_rule_violation_returns_validation_envelope(client, store):
    response = await _create_project(client, code="bad code")
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["category"] == "validation"
    assert "Project code must contain only uppercase letters, numbers, and hyphens" in error["details"]
    assert store.count(Project) == 0


async def test_malformed_body_uses_the_same_envelope(client):
    response = await client.post("/api/v1/projects", json={"name": "Apollo"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d.startswith("code:") for d in error["details"])


async def test_duplicate_code_returns_409(client):
    await _create_project(client)
    response = await _create_project(client, name="Other")
    assert response.status_code == 409
    assert response.json()["error"]["category"] == "conflict"


async def test_unknown_project_returns_404(client):
    response = await client.get(f"/api/v1/projects/{uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_lookup_by_code_then_delete(client, store):
    created = (await _create_project(client)).json()

    fetched = await client.get("/api/v1/projects/code/APL")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == created["id"]

    deleted = await client.delete(f"/api/v1/projects/{created['id']}")
    assert deleted.status_code == 204
    assert deleted.content == b""
    assert store.count(Project) == 0


async def test_list_is_paged(client):
    for n in range(3):
        await _create_project(client, code=f"P-{n}", name=f"Project {n}")

    response = await client.get("/api/v1/projects", params={"page": 2, "page_size": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 3
    assert body["total_pages"] == 2
    assert len(body["items"]) == 1
    assert body["has_previous"] is True
    assert body["has_next"] is False


async def test_status_change_rejects_illegal_transition(client):
    created = (await _create_project(client)).json()
    response = await client.patch(
        f"/api/v1/projects/{created['id']}/status", json={"status": "completed"},
    )
    assert response.status_code == 409


async def test_failed_eviction_surfaces_as_503(client, cache, store):
    cache.fail("remove_by_pattern")
    response = await _create_project(client)
    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "CACHE_INVALIDATION_FAILED"
    assert error["context"]["request_type"] == "CreateProjectCommand"
    # the write itself committed
    assert store.count(Project) == 1


async def test_organization_and_user_routes(client):
    org = await client.post("/api/v1/organizations", json={"name": "Acme"})
    assert org.status_code == 201
    user = await client.post("/api/v1/users", json={
        "email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace",
        "organization_id": org.json()["id"],
    })
    assert user.status_code == 201
    assert user.json()["full_name"] == "Ada Lovelace"
