"""Pipeline dispatch — end-to-end stage behaviour over in-memory collaborators.

Tests cover:
    - Validation failures aggregate every message and touch neither store nor cache
    - Commands run in exactly one transaction; queries in none
    - Eviction happens only after commit, and never after failure, fault or cancellation
    - Handler-reported keys are evicted with the registered targets
    - Eviction retries, then faults with CacheInvalidationError after the commit
    - Unregistered request types fault before any unit of work opens
"""

import logging
from dataclasses import dataclass

import pytest

from fakes import FakeStore, FlakyCache
from pmflow.core.errors import (
    CacheInvalidationError, RequestCancelledError, TransactionAlreadyActiveError,
    UnregisteredHandlerError,
)
from pmflow.core.requests import CancellationToken, Command, Query
from pmflow.core.result import FailureKind, Success, conflict
from pmflow.core.validation import required
from pmflow.models.organization import Organization
from pmflow.services.pipeline_executor import PipelineExecutor
from pmflow.services.request_dispatch import RequestDispatcher
from pmflow.services.request_registry import RequestRegistry
from pmflow.services.stage_cache_invalidation import CacheInvalidationStage
from pmflow.services.stage_logging import LoggingStage
from pmflow.services.stage_performance import PerformanceStage
from pmflow.services.stage_transaction import TransactionStage
from pmflow.services.stage_validation import ValidationStage
from pmflow.services.handler_support import new_id, utcnow


@dataclass(frozen=True, kw_only=True)
class RenameCommand(Command):
    name: str
    outcome: str = "ok"


@dataclass(frozen=True, kw_only=True)
class PeekQuery(Query):
    key: str


@dataclass(frozen=True, kw_only=True)
class StrayCommand(Command):
    pass


class _Recorder:
    """Handler factory that records each call and acts on request.outcome."""

    def __init__(self, store: FakeStore, cache: FlakyCache):
        self.store = store
        self.cache = cache
        self.calls = 0
        self.commits_seen_at_eviction: list[int] = []

    def factory(self, scope):
        async def handle(request):
            self.calls += 1
            if isinstance(request, PeekQuery):
                return Success(await scope.cache.get(request.key))
            org = Organization(
                id=new_id(), name=request.name, is_active=True,
                created_by="test", created_at=utcnow(),
            )
            await scope.uow.repository(Organization).add(org)
            await scope.uow.save_changes()
            scope.mark_touched("organizations:touched")
            if request.outcome == "fail":
                return conflict("name taken")
            if request.outcome == "raise":
                raise RuntimeError("boom")
            if request.outcome == "cancel":
                scope.cancellation.cancel()
            if request.outcome == "nested":
                await scope.uow.begin()
            return Success(org.id)
        return handle


def _dispatcher(store, cache, recorder, attempts=3):
    registry = RequestRegistry()
    registry.command(
        RenameCommand, recorder.factory,
        rules=(required("name", "Name is required"),),
        invalidation=lambda r: ("organizations:list:*", "organizations:one"),
    )
    registry.query(PeekQuery, recorder.factory)
    executor = PipelineExecutor((
        LoggingStage(),
        PerformanceStage(500),
        ValidationStage(),
        CacheInvalidationStage(attempts, backoff_seconds=0),
        TransactionStage(),
    ))
    return RequestDispatcher(registry.freeze(), executor, store.unit_of_work, cache)


@pytest.fixture
def recorder(store, cache):
    rec = _Recorder(store, cache)
    original = cache.remove

    async def remove(key):
        rec.commits_seen_at_eviction.append(store.commits)
        await original(key)

    cache.remove = remove
    return rec


@pytest.fixture
def pipeline(store, cache, recorder):
    return _dispatcher(store, cache, recorder)


# --- Validation ---------------------------------------------------------------

async def test_validation_failure_short_circuits(pipeline, store, cache, recorder):
    result = await pipeline.execute(RenameCommand(name="  "))
    assert result.kind is FailureKind.VALIDATION
    assert result.errors == ("Name is required",)
    assert recorder.calls == 0
    assert store.begins == 0
    assert cache.calls == []


# --- Transactions & eviction --------------------------------------------------

async def test_command_commits_once_then_evicts(pipeline, store, cache, recorder):
    result = await pipeline.execute(RenameCommand(name="Acme"))

    assert result.is_success
    assert (store.begins, store.commits, store.rollbacks) == (1, 1, 0)
    assert store.count(Organization) == 1
    assert cache.evictions() == [
        "organizations:list:*", "organizations:one", "organizations:touched",
    ]
    assert recorder.commits_seen_at_eviction == [1, 1]


async def test_failure_rolls_back_and_evicts_nothing(pipeline, store, cache):
    cache_entry = b"cached"
    await cache.set("organizations:one", cache_entry, 60)

    result = await pipeline.execute(RenameCommand(name="Acme", outcome="fail"))

    assert result.kind is FailureKind.CONFLICT
    assert (store.commits, store.rollbacks) == (0, 1)
    assert store.count(Organization) == 0
    assert cache.evictions() == []
    assert await cache.get("organizations:one") == cache_entry


async def test_fault_rolls_back_and_propagates(pipeline, store, cache):
    with pytest.raises(RuntimeError, match="boom"):
        await pipeline.execute(RenameCommand(name="Acme", outcome="raise"))
    assert (store.commits, store.rollbacks) == (0, 1)
    assert store.count(Organization) == 0
    assert cache.evictions() == []


async def test_cancellation_before_commit_discards_work(pipeline, store, cache):
    with pytest.raises(RequestCancelledError):
        await pipeline.execute(RenameCommand(name="Acme", outcome="cancel"))
    assert store.commits == 0
    assert store.count(Organization) == 0
    assert cache.evictions() == []


async def test_cancelled_token_stops_handler_from_running(pipeline, store, recorder):
    token = CancellationToken()
    token.cancel()
    with pytest.raises(RequestCancelledError):
        await pipeline.execute(RenameCommand(name="Acme"), token)
    assert recorder.calls == 0
    assert store.commits == 0


async def test_nested_begin_faults_and_rolls_back(pipeline, store):
    with pytest.raises(TransactionAlreadyActiveError):
        await pipeline.execute(RenameCommand(name="Acme", outcome="nested"))
    assert store.commits == 0
    assert store.count(Organization) == 0


async def test_query_runs_without_transaction(pipeline, store, cache):
    await cache.set("k", b"v", 60)
    result = await pipeline.execute(PeekQuery(key="k"))
    assert result.value == b"v"
    assert store.begins == 0
    assert cache.evictions() == []


async def test_unregistered_type_faults_before_unit_of_work(pipeline, store, recorder):
    with pytest.raises(UnregisteredHandlerError):
        await pipeline.execute(StrayCommand())
    assert store.begins == 0
    assert recorder.calls == 0


# --- Eviction retries ---------------------------------------------------------

async def test_transient_eviction_failure_is_retried(store, cache, recorder):
    pipeline = _dispatcher(store, cache, recorder)
    cache.fail("remove_by_pattern", times=2)

    result = await pipeline.execute(RenameCommand(name="Acme"))

    assert result.is_success
    assert cache.evictions().count("organizations:list:*") == 3


async def test_persistent_eviction_failure_faults_after_commit(store, cache, recorder):
    pipeline = _dispatcher(store, cache, recorder, attempts=2)
    cache.fail("remove_by_pattern")

    with pytest.raises(CacheInvalidationError) as excinfo:
        await pipeline.execute(RenameCommand(name="Acme"))

    assert excinfo.value.targets == ["organizations:list:*"]
    assert excinfo.value.attempts == 2
    # the write is durable; only the eviction failed
    assert store.commits == 1
    assert store.count(Organization) == 1


async def test_pattern_eviction_of_absent_keys_is_a_noop(pipeline, cache):
    result = await pipeline.execute(RenameCommand(name="Acme"))
    assert result.is_success
    assert cache.keys() == []


# --- Request ids --------------------------------------------------------------

async def test_bound_request_id_reaches_scope_and_logs(pipeline, caplog):
    with caplog.at_level(logging.INFO, logger="pmflow.services.stage_logging"):
        await pipeline.bind("corr-1").execute(RenameCommand(name="Acme"))
        await pipeline.execute(RenameCommand(name="Beta"), request_id="corr-2")

    ids = [r.request_id for r in caplog.records if r.name == "pmflow.services.stage_logging"]
    assert ids[:2] == ["corr-1", "corr-1"]
    assert ids[2:] == ["corr-2", "corr-2"]
