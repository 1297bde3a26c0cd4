"""Cache Keys — the one place cache key strings are built.

Invariants:
    - Singletons: {prefix}:{id}
    - Paginated lists: {prefix}:list:page{N}:size{M}:{filterToken} (filterToken "all" when absent)
    - Relational subsets: {prefix}:{relation}:{relatedId}[:...]
    - Patterns end in ":*" and are only used for eviction, never for get/set
    - Output is bit-reproducible: same inputs, same string, no hashing

Design Decisions:
    - Plain functions over a class with static methods: nothing to instantiate
    - Prefixes are module constants so invalidation maps and query handlers share them
"""

from datetime import date
from uuid import UUID

# ─── Prefixes ────────────────────────────────────────────────────

ORGANIZATION_PREFIX = "organizations"
USER_PREFIX = "users"
PROJECT_PREFIX = "projects"
SPRINT_PREFIX = "sprints"
TASK_PREFIX = "tasks"
TIME_ENTRY_PREFIX = "timeentries"
RISK_PREFIX = "risks"
ISSUE_PREFIX = "issues"
DOCUMENT_PREFIX = "documents"
RESOURCE_ALLOCATION_PREFIX = "resourceallocations"

ALL_FILTER = "all"


# ─── Generic builders ────────────────────────────────────────────

def entity(prefix: str, entity_id: UUID | str) -> str:
    return f"{prefix}:{entity_id}"


def entity_list(
    prefix: str, page: int, page_size: int, filter_token: str | None = None,
) -> str:
    return f"{prefix}:list:page{page}:size{page_size}:{filter_token or ALL_FILTER}"


def related(prefix: str, relation: str, related_id: UUID | str) -> str:
    return f"{prefix}:{relation}:{related_id}"


def pattern(*parts: object) -> str:
    """Bulk-eviction pattern: pattern("projects", "list") -> "projects:list:*"."""
    return ":".join(str(p) for p in parts) + ":*"


def is_pattern(key: str) -> bool:
    return key.endswith(":*")


# ─── Per-aggregate keys ──────────────────────────────────────────

def project_by_code(code: str) -> str:
    return related(PROJECT_PREFIX, "code", code)


def user_by_email(email: str) -> str:
    return related(USER_PREFIX, "email", email.lower())


def tasks_by_project(
    project_id: UUID, page: int, page_size: int, filter_token: str | None = None,
) -> str:
    return (
        f"{related(TASK_PREFIX, 'project', project_id)}"
        f":page{page}:size{page_size}:{filter_token or ALL_FILTER}"
    )


def time_entries_by_user(
    user_id: UUID, start: date | None, end: date | None,
) -> str:
    return (
        f"{related(TIME_ENTRY_PREFIX, 'user', user_id)}"
        f":{start.isoformat() if start else ALL_FILTER}"
        f":{end.isoformat() if end else ALL_FILTER}"
    )


def filter_token(**filters: object) -> str:
    """Stable token for list filters: sorted name=value pairs joined by ','.

    Values of None are dropped so an unfiltered list shares the "all" key.
    """
    parts = [
        f"{name}={getattr(value, 'value', value)}"
        for name, value in sorted(filters.items())
        if value is not None
    ]
    return ",".join(parts) or ALL_FILTER
