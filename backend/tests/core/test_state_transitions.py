"""Lifecycle rules — project transitions and sprint/issue guards."""

from datetime import date

import pytest

from pmflow.core.domain_types import IssueStatus, ProjectStatus, SprintStatus
from pmflow.core.state_transitions import (
    check_issue_resolve, check_project_transition, check_sprint_complete,
    check_sprint_start, check_sprint_update,
)


@pytest.mark.parametrize("current,target", [
    (ProjectStatus.PLANNING, ProjectStatus.ACTIVE),
    (ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD),
    (ProjectStatus.ON_HOLD, ProjectStatus.ACTIVE),
    (ProjectStatus.ACTIVE, ProjectStatus.COMPLETED),
    (ProjectStatus.COMPLETED, ProjectStatus.ARCHIVED),
])
def test_allowed_project_transitions(current, target):
    assert check_project_transition(current, target) is None


def test_same_status_is_allowed():
    assert check_project_transition(ProjectStatus.ARCHIVED, ProjectStatus.ARCHIVED) is None


def test_cannot_cancel_completed_project():
    message = check_project_transition(ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)
    assert message == "Cannot cancel completed or already cancelled projects"


def test_archived_is_terminal():
    assert check_project_transition(ProjectStatus.ARCHIVED, ProjectStatus.ACTIVE)


def test_completed_sprint_is_read_only():
    assert check_sprint_update(SprintStatus.COMPLETED) == "Cannot update completed sprint"
    assert check_sprint_update(SprintStatus.ACTIVE) is None


def test_sprint_start_requires_planned_and_start_date_reached():
    start = date(2024, 3, 1)
    assert check_sprint_start(SprintStatus.PLANNED, start, date(2024, 3, 1)) is None
    assert check_sprint_start(SprintStatus.PLANNED, start, date(2024, 2, 28)) == (
        "Cannot start sprint before start date"
    )
    assert check_sprint_start(SprintStatus.ACTIVE, start, date(2024, 3, 5)) == (
        "Only planned sprints can be started"
    )


def test_only_active_sprints_complete():
    assert check_sprint_complete(SprintStatus.ACTIVE) is None
    assert check_sprint_complete(SprintStatus.PLANNED)


def test_closed_issue_cannot_be_resolved():
    assert check_issue_resolve(IssueStatus.CLOSED)
    assert check_issue_resolve(IssueStatus.OPEN) is None
