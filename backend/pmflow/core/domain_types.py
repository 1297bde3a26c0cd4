"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Entity ids wrap UUIDs — never use bare UUID in domain logic signatures
    - All valid states encoded as Enums — no raw string matching
    - CacheTTL values are seconds and match the four TTL classes exactly

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: cached DTOs are JSON)
"""

from enum import Enum, IntEnum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

OrganizationId = NewType("OrganizationId", UUID)
UserId = NewType("UserId", UUID)
ProjectId = NewType("ProjectId", UUID)
SprintId = NewType("SprintId", UUID)
TaskId = NewType("TaskId", UUID)
TimeEntryId = NewType("TimeEntryId", UUID)
RiskId = NewType("RiskId", UUID)
IssueId = NewType("IssueId", UUID)
DocumentId = NewType("DocumentId", UUID)
ResourceAllocationId = NewType("ResourceAllocationId", UUID)


# ─── Pipeline Types ──────────────────────────────────────────────

class RequestKind(str, Enum):
    """Declared at registration — decides whether a transaction is opened."""
    COMMAND = "command"
    QUERY = "query"


class CacheTTL(IntEnum):
    """TTL classes in seconds."""
    SHORT = 5 * 60
    MEDIUM = 15 * 60
    LONG = 60 * 60
    VERY_LONG = 24 * 60 * 60


# ─── Enums ───────────────────────────────────────────────────────

class Priority(str, Enum):
    """Shared by projects and tasks."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class TaskStatus(str, Enum):
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    TESTING = "testing"
    DONE = "done"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskType(str, Enum):
    TASK = "task"
    STORY = "story"
    BUG = "bug"
    EPIC = "epic"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"


class SprintStatus(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    SYSTEM_ADMIN = "system_admin"
    ORGANIZATION_ADMIN = "organization_admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_LEAD = "team_lead"
    DEVELOPER = "developer"
    DESIGNER = "designer"
    TESTER = "tester"
    VIEWER = "viewer"


class IssueStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskStatus(str, Enum):
    IDENTIFIED = "identified"
    ANALYZING = "analyzing"
    MITIGATING = "mitigating"
    RESOLVED = "resolved"
    ACCEPTED = "accepted"


class AllocationType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    CONSULTANT = "consultant"


class TimeEntryType(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    DESIGN = "design"
    MEETING = "meeting"
    REVIEW = "review"
    DOCUMENTATION = "documentation"
    OTHER = "other"


class DocumentType(str, Enum):
    REQUIREMENTS = "requirements"
    DESIGN = "design"
    TECHNICAL_SPEC = "technical_spec"
    USER_GUIDE = "user_guide"
    TEST_PLAN = "test_plan"
    OTHER = "other"
