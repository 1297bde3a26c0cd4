"""Result values and paged-query clamping."""

import pytest

from pmflow.core.requests import ListProjectsQuery, MAX_PAGE_SIZE
from pmflow.core.result import (
    FailureKind, Success, conflict, not_found, validation_failure,
)


def test_validation_failure_keeps_every_message():
    failure = validation_failure(["a", "b"])
    assert failure.kind is FailureKind.VALIDATION
    assert failure.errors == ("a", "b")
    assert failure.to_response()["error"]["details"] == ["a", "b"]


def test_not_found_and_conflict_kinds():
    assert not_found("Project", "x").kind is FailureKind.NOT_FOUND
    assert conflict("dup").to_response()["error"]["code"] == "CONFLICT"
    assert Success(1).is_success and not conflict("x").is_success


@pytest.mark.parametrize("page,size,expected", [
    (0, 10, (1, 10)),
    (-3, 0, (1, 10)),
    (2, 500, (2, MAX_PAGE_SIZE)),
    (4, 25, (4, 25)),
])
def test_paged_query_clamps(page, size, expected):
    query = ListProjectsQuery(page=page, page_size=size)
    assert (query.effective_page, query.effective_page_size) == expected
