"""Root conftest — shared test configuration and pipeline fixtures.

Invariants:
    - Tests never reach PostgreSQL or Redis: DATABASE_URL points at SQLite and the
      cache backend is the in-process one
    - Every test gets its own FakeStore and cache; nothing survives between tests
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

import pytest  # noqa: E402

from fakes import FakeStore, FlakyCache  # noqa: E402
from pmflow.config import Settings  # noqa: E402
from pmflow.services.register_requests import build_registry  # noqa: E402
from pmflow.services.request_dispatch import RequestDispatcher, build_pipeline  # noqa: E402


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def cache():
    return FlakyCache()


@pytest.fixture
def dispatcher(store, cache):
    """Production registry and stage order over in-memory collaborators."""
    settings = Settings(cache_backend="memory", cache_invalidation_attempts=3)
    return RequestDispatcher(
        build_registry(), build_pipeline(settings), store.unit_of_work, cache,
    )
