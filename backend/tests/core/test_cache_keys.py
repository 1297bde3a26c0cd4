"""Cache key grammar — the exact strings the invalidation map and readers share.

Tests cover:
    - Singleton, paginated-list and relational key shapes
    - Pattern construction and detection
    - filter_token stability and the "all" default
"""

from datetime import date
from uuid import UUID

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import ProjectStatus

PID = UUID("11111111-1111-1111-1111-111111111111")


def test_entity_key_is_prefix_colon_id():
    assert keys.entity(keys.PROJECT_PREFIX, PID) == f"projects:{PID}"


def test_list_key_defaults_filter_token_to_all():
    assert keys.entity_list("projects", 2, 25) == "projects:list:page2:size25:all"


def test_list_key_carries_filter_token():
    token = keys.filter_token(status=ProjectStatus.ACTIVE)
    assert keys.entity_list("projects", 1, 10, token) == (
        "projects:list:page1:size10:status=active"
    )


def test_related_key():
    assert keys.related(keys.SPRINT_PREFIX, "project", PID) == f"sprints:project:{PID}"


def test_project_by_code_key():
    assert keys.project_by_code("PRJ-1") == "projects:code:PRJ-1"


def test_user_by_email_key_is_lower_cased():
    assert keys.user_by_email("Ana@Example.COM") == "users:email:ana@example.com"


def test_tasks_by_project_key_includes_paging():
    assert keys.tasks_by_project(PID, 1, 10) == f"tasks:project:{PID}:page1:size10:all"


def test_time_entries_by_user_key_encodes_window():
    key = keys.time_entries_by_user(PID, date(2024, 1, 1), None)
    assert key == f"timeentries:user:{PID}:2024-01-01:all"


def test_pattern_ends_with_wildcard():
    assert keys.pattern("projects", "list") == "projects:list:*"
    assert keys.is_pattern("projects:list:*")
    assert not keys.is_pattern(f"projects:{PID}")


def test_list_keys_match_their_eviction_pattern():
    from fnmatch import fnmatchcase
    assert fnmatchcase(keys.entity_list("projects", 3, 50), keys.pattern("projects", "list"))
    assert fnmatchcase(
        keys.tasks_by_project(PID, 1, 10), keys.pattern("tasks", "project", PID),
    )


def test_filter_token_is_sorted_and_drops_none():
    assert keys.filter_token(b="2", a="1", c=None) == "a=1,b=2"


def test_filter_token_without_values_is_all():
    assert keys.filter_token(status=None) == "all"


def test_keys_are_reproducible():
    assert keys.entity_list("users", 1, 10, "x") == keys.entity_list("users", 1, 10, "x")
