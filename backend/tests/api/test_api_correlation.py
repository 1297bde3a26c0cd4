"""Correlation ids — taken from or added to every request, echoed, and logged by the pipeline."""

import logging

from pmflow.api.correlation import CORRELATION_HEADER, resolve_correlation_id


async def test_supplied_id_is_echoed_and_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="pmflow.services.stage_logging"):
        response = await client.post(
            "/api/v1/organizations", json={"name": "Acme"},
            headers={CORRELATION_HEADER: "trace-42"},
        )

    assert response.status_code == 201
    assert response.headers[CORRELATION_HEADER] == "trace-42"
    pipeline_records = [r for r in caplog.records if r.name == "pmflow.services.stage_logging"]
    assert pipeline_records
    assert {r.request_id for r in pipeline_records} == {"trace-42"}


async def test_missing_id_is_generated(client):
    first = await client.get("/api/v1/health/")
    second = await client.get("/api/v1/health/")
    assert first.headers[CORRELATION_HEADER]
    assert first.headers[CORRELATION_HEADER] != second.headers[CORRELATION_HEADER]


async def test_fault_envelope_carries_the_id(client, cache):
    cache.fail("remove_by_pattern")
    response = await client.post(
        "/api/v1/projects", json={"name": "Apollo", "code": "APL"},
        headers={CORRELATION_HEADER: "trace-503"},
    )
    assert response.status_code == 503
    assert response.headers[CORRELATION_HEADER] == "trace-503"
    assert response.json()["error"]["context"]["request_id"] == "trace-503"


def test_unsafe_ids_are_replaced():
    assert resolve_correlation_id("abc-123_x.y") == "abc-123_x.y"
    assert resolve_correlation_id("bad id\r\nX-Injected: 1") != "bad id\r\nX-Injected: 1"
    assert len(resolve_correlation_id("x" * 65)) == 32
    assert len(resolve_correlation_id(None)) == 32
