"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Organization, User and Project are aggregate roots; the rest are scoped by project_id

Design Decisions:
    - One file per entity for locality (ADR: max 3-4 files to understand a feature)
    - All models imported here so Base.metadata is complete before create_all / autogenerate
    - No ORM relationship() attributes: handlers load children by FK through repositories,
      which keeps async code free of lazy-load IO (ADR: no implicit IO in attribute access)
"""

from pmflow.models.organization import Organization  # noqa: F401
from pmflow.models.user import User  # noqa: F401
from pmflow.models.project import Project  # noqa: F401
from pmflow.models.sprint import Sprint  # noqa: F401
from pmflow.models.task import Task  # noqa: F401
from pmflow.models.time_entry import TimeEntry  # noqa: F401
from pmflow.models.risk import Risk  # noqa: F401
from pmflow.models.issue import Issue  # noqa: F401
from pmflow.models.document import Document  # noqa: F401
from pmflow.models.resource_allocation import ResourceAllocation  # noqa: F401
