"""Request Rule Sets — the validation constraints registered per request type.

Invariants:
    - One RuleSet constant per validated request type; unlisted types validate nothing
    - Messages are user-facing and name the field in plain words
    - Rules only check the request itself (no lookups); existence checks belong to handlers

Design Decisions:
    - Module-level tuples over per-call construction: built once at import, shared by
      every request (ADR: stages hold no per-request state)
"""

from pmflow.core.domain_types import (
    AllocationType, DocumentType, IssueSeverity, IssueStatus, Priority,
    ProjectStatus, RiskLevel, RiskStatus, TaskStatus, TaskType,
    TimeEntryType, UserRole,
)
from pmflow.core.validation import (
    RuleSet, after, both_or_neither, in_range, matches, max_length,
    not_in_future, one_of, required,
)

_EMAIL = r"[^@\s]+@[^@\s]+\.[^@\s]+"
_PROJECT_CODE = r"[A-Z0-9-]+"
_CURRENCY = r"[A-Z]{3}"


# ─── Organizations ───────────────────────────────────────────────

CREATE_ORGANIZATION_RULES: RuleSet = (
    required("name", "Organization name is required"),
    max_length("name", 200, "Organization name must not exceed 200 characters"),
    max_length("description", 2000, "Description must not exceed 2000 characters"),
    max_length("website", 500, "Website must not exceed 500 characters"),
)

UPDATE_ORGANIZATION_RULES: RuleSet = (
    required("id", "Organization ID is required"),
    *CREATE_ORGANIZATION_RULES,
)


# ─── Users ───────────────────────────────────────────────────────

CREATE_USER_RULES: RuleSet = (
    required("email", "Email is required"),
    matches("email", _EMAIL, "Email must be a valid email address"),
    max_length("email", 255, "Email must not exceed 255 characters"),
    required("first_name", "First name is required"),
    max_length("first_name", 100, "First name must not exceed 100 characters"),
    required("last_name", "Last name is required"),
    max_length("last_name", 100, "Last name must not exceed 100 characters"),
    required("organization_id", "Organization ID is required"),
    one_of("role", UserRole, "Invalid user role"),
)

GET_USER_BY_EMAIL_RULES: RuleSet = (
    required("email", "Email is required"),
)

UPDATE_USER_RULES: RuleSet = (
    required("id", "User ID is required"),
    required("first_name", "First name is required"),
    max_length("first_name", 100, "First name must not exceed 100 characters"),
    required("last_name", "Last name is required"),
    max_length("last_name", 100, "Last name must not exceed 100 characters"),
    one_of("role", UserRole, "Invalid user role"),
)


# ─── Projects ────────────────────────────────────────────────────

CREATE_PROJECT_RULES: RuleSet = (
    required("name", "Project name is required"),
    max_length("name", 200, "Project name must not exceed 200 characters"),
    required("code", "Project code is required"),
    max_length("code", 20, "Project code must not exceed 20 characters"),
    matches(
        "code", _PROJECT_CODE,
        "Project code must contain only uppercase letters, numbers, and hyphens",
    ),
    max_length("description", 2000, "Description must not exceed 2000 characters"),
    one_of("priority", Priority, "Priority must be Low, Medium, High, or Critical"),
    required("created_by", "CreatedBy is required"),
    after("end_date", "start_date", "End date must be after start date"),
    in_range("budget_amount", "Budget amount must be greater than 0", gt=0),
    matches("budget_currency", _CURRENCY, "Budget currency must be a 3-letter ISO code"),
    both_or_neither(
        "budget_amount", "budget_currency",
        "Budget amount and currency must be provided together",
    ),
)

UPDATE_PROJECT_RULES: RuleSet = (
    required("id", "Project ID is required"),
    required("name", "Project name is required"),
    max_length("name", 200, "Project name must not exceed 200 characters"),
    max_length("description", 2000, "Description must not exceed 2000 characters"),
    one_of("priority", Priority, "Invalid priority value"),
    in_range("budget_amount", "Budget amount must be non-negative", ge=0),
    matches("budget_currency", _CURRENCY, "Budget currency must be a 3-letter ISO code"),
    after("end_date", "start_date", "End date must be after start date"),
)

CHANGE_PROJECT_STATUS_RULES: RuleSet = (
    required("id", "Project ID is required"),
    required("status", "Status is required"),
    one_of("status", ProjectStatus, "Invalid project status"),
)


# ─── Sprints ─────────────────────────────────────────────────────

CREATE_SPRINT_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("name", "Sprint name is required"),
    max_length("name", 200, "Sprint name must not exceed 200 characters"),
    in_range("sprint_number", "Sprint number must be positive", gt=0),
    required("start_date", "Start date is required"),
    required("end_date", "End date is required"),
    after("end_date", "start_date", "End date must be after start date"),
    max_length("goal", 1000, "Sprint goal must not exceed 1000 characters"),
)

UPDATE_SPRINT_RULES: RuleSet = (
    required("id", "Sprint ID is required"),
    required("name", "Sprint name is required"),
    max_length("name", 200, "Sprint name must not exceed 200 characters"),
    after("end_date", "start_date", "End date must be after start date"),
    max_length("goal", 1000, "Sprint goal must not exceed 1000 characters"),
)


# ─── Tasks ───────────────────────────────────────────────────────

CREATE_TASK_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("title", "Task title is required"),
    max_length("title", 300, "Task title must not exceed 300 characters"),
    required("code", "Task code is required"),
    max_length("code", 50, "Task code must not exceed 50 characters"),
    one_of("type", TaskType, "Invalid task type"),
    one_of("priority", Priority, "Invalid priority value"),
    in_range("estimated_hours", "Estimated hours cannot be negative", ge=0),
    in_range("story_points", "Story points cannot be negative", ge=0),
)

UPDATE_TASK_RULES: RuleSet = (
    required("id", "Task ID is required"),
    required("title", "Task title is required"),
    max_length("title", 300, "Task title must not exceed 300 characters"),
    one_of("status", TaskStatus, "Invalid task status"),
    one_of("priority", Priority, "Invalid priority value"),
    in_range("estimated_hours", "Estimated hours cannot be negative", ge=0),
    in_range("story_points", "Story points cannot be negative", ge=0),
)


# ─── Time Entries ────────────────────────────────────────────────

CREATE_TIME_ENTRY_RULES: RuleSet = (
    required("user_id", "User ID is required"),
    required("task_id", "Task ID is required"),
    in_range("hours", "Hours must be positive", gt=0),
    in_range("hours", "Cannot log more than 24 hours per entry", le=24),
    one_of("type", TimeEntryType, "Invalid time entry type"),
    required("date", "Date is required"),
    not_in_future("date", "Cannot log time for future dates"),
    max_length("description", 1000, "Description must not exceed 1000 characters"),
)

UPDATE_TIME_ENTRY_RULES: RuleSet = (
    required("id", "Time entry ID is required"),
    in_range("hours", "Hours must be positive", gt=0),
    in_range("hours", "Cannot log more than 24 hours per entry", le=24),
    one_of("type", TimeEntryType, "Invalid time entry type"),
    required("date", "Date is required"),
    not_in_future("date", "Cannot log time for future dates"),
)


# ─── Risks ───────────────────────────────────────────────────────

CREATE_RISK_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("title", "Risk title is required"),
    max_length("title", 300, "Risk title must not exceed 300 characters"),
    required("description", "Risk description is required"),
    one_of("level", RiskLevel, "Invalid risk level"),
    in_range("probability", "Probability must be between 0 and 100", ge=0, le=100),
    in_range("impact", "Impact must be between 0 and 100", ge=0, le=100),
)

UPDATE_RISK_RULES: RuleSet = (
    required("id", "Risk ID is required"),
    *CREATE_RISK_RULES[1:],
    one_of("status", RiskStatus, "Invalid risk status"),
)


# ─── Issues ──────────────────────────────────────────────────────

CREATE_ISSUE_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("title", "Issue title is required"),
    max_length("title", 300, "Issue title must not exceed 300 characters"),
    required("description", "Issue description is required"),
    one_of("severity", IssueSeverity, "Invalid issue severity"),
)

UPDATE_ISSUE_RULES: RuleSet = (
    required("id", "Issue ID is required"),
    *CREATE_ISSUE_RULES[1:],
)

RESOLVE_ISSUE_RULES: RuleSet = (
    required("id", "Issue ID is required"),
    required("resolution", "Resolution is required"),
    max_length("resolution", 2000, "Resolution must not exceed 2000 characters"),
)

CHANGE_ISSUE_STATUS_RULES: RuleSet = (
    required("id", "Issue ID is required"),
    required("status", "Status is required"),
    one_of("status", IssueStatus, "Invalid issue status"),
)


# ─── Documents ───────────────────────────────────────────────────

CREATE_DOCUMENT_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("name", "Document name is required"),
    max_length("name", 300, "Document name must not exceed 300 characters"),
    required("file_path", "File path is required"),
    in_range("file_size", "File size must be positive", gt=0),
    one_of("type", DocumentType, "Invalid document type"),
)

UPDATE_DOCUMENT_RULES: RuleSet = (
    required("id", "Document ID is required"),
    required("name", "Document name is required"),
    max_length("name", 300, "Document name must not exceed 300 characters"),
    one_of("type", DocumentType, "Invalid document type"),
)


# ─── Resource Allocations ────────────────────────────────────────

CREATE_RESOURCE_ALLOCATION_RULES: RuleSet = (
    required("project_id", "Project ID is required"),
    required("user_id", "User ID is required"),
    one_of("type", AllocationType, "Invalid allocation type"),
    in_range(
        "allocation_percentage",
        "Allocation percentage must be between 0 and 100", ge=0, le=100,
    ),
    required("start_date", "Start date is required"),
    required("end_date", "End date is required"),
    after("end_date", "start_date", "End date must be after start date"),
    in_range("hourly_rate", "Hourly rate cannot be negative", ge=0),
)

UPDATE_RESOURCE_ALLOCATION_RULES: RuleSet = (
    required("id", "Resource allocation ID is required"),
    *CREATE_RESOURCE_ALLOCATION_RULES[2:],
)
