"""State Transitions — pure lifecycle rules for projects, sprints, issues, tasks and risks.

Invariants:
    - All functions are PURE: no IO, no DB, no side effects
    - check_* returns None when allowed, else the user-facing conflict message
    - Moving to the current status is always allowed (a no-op for the caller)

Design Decisions:
    - Error-or-None return over exceptions: handlers turn the message into a
      Failure(kind=CONFLICT) (ADR: business rules are values, not faults)
    - Transition table as a dict of frozensets: the whole project lifecycle is
      readable in one place
"""

from datetime import date

from pmflow.core.domain_types import (
    IssueStatus, ProjectStatus, RiskStatus, SprintStatus, TaskStatus,
)

PROJECT_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.PLANNING: frozenset({ProjectStatus.ACTIVE, ProjectStatus.CANCELLED}),
    ProjectStatus.ACTIVE: frozenset({
        ProjectStatus.ON_HOLD, ProjectStatus.COMPLETED, ProjectStatus.CANCELLED,
    }),
    ProjectStatus.ON_HOLD: frozenset({ProjectStatus.ACTIVE, ProjectStatus.CANCELLED}),
    ProjectStatus.COMPLETED: frozenset({ProjectStatus.ARCHIVED}),
    ProjectStatus.CANCELLED: frozenset({ProjectStatus.ARCHIVED}),
    ProjectStatus.ARCHIVED: frozenset(),
}


# ─── Projects ────────────────────────────────────────────────────

def check_project_transition(
    current: ProjectStatus, target: ProjectStatus,
) -> str | None:
    if current == target:
        return None
    if target in PROJECT_TRANSITIONS[current]:
        return None
    if target == ProjectStatus.CANCELLED:
        return "Cannot cancel completed or already cancelled projects"
    return (
        f"Project cannot move from {current.value} to {target.value}"
    )


# ─── Sprints ─────────────────────────────────────────────────────

def check_sprint_update(current: SprintStatus) -> str | None:
    if current == SprintStatus.COMPLETED:
        return "Cannot update completed sprint"
    return None


def check_sprint_start(
    current: SprintStatus, start_date: date, today: date,
) -> str | None:
    if current != SprintStatus.PLANNED:
        return "Only planned sprints can be started"
    if today < start_date:
        return "Cannot start sprint before start date"
    return None


def check_sprint_complete(current: SprintStatus) -> str | None:
    if current != SprintStatus.ACTIVE:
        return "Only active sprints can be completed"
    return None


# ─── Issues / Tasks / Risks ──────────────────────────────────────

def issue_is_resolved(status: IssueStatus) -> bool:
    """resolved_at is stamped when an issue enters one of these states."""
    return status in (IssueStatus.RESOLVED, IssueStatus.CLOSED)


def check_issue_resolve(current: IssueStatus) -> str | None:
    if current == IssueStatus.CLOSED:
        return "Closed issues cannot be resolved; reopen first"
    return None


def task_is_done(status: TaskStatus) -> bool:
    return status == TaskStatus.DONE


def risk_is_resolved(status: RiskStatus) -> bool:
    return status == RiskStatus.RESOLVED
