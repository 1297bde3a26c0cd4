"""Result — tagged success/failure value returned by every handler and stage.

Invariants:
    - Success carries a value; Failure carries a reason plus every message that produced it
    - Expected business failures are Failure values, never exceptions
    - Failure.kind drives HTTP mapping and nothing else (stages only look at is_success)

Design Decisions:
    - Two frozen dataclasses over one class with optional fields: pattern matching and
      isinstance checks read cleanly (ADR: uniform response shape, like tool result dicts)
    - FailureKind as str Enum: serializes to JSON without custom encoders
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    """Business failure taxonomy."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    reason: str
    kind: FailureKind = FailureKind.CONFLICT
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_success(self) -> bool:
        return False

    def to_response(self) -> dict:
        return {
            "error": {
                "code": _FAILURE_CODES[self.kind],
                "message": self.reason,
                "category": self.kind.value,
                "details": list(self.errors) or [self.reason],
            },
        }


Result = Union[Success[Any], Failure]

_FAILURE_CODES = {
    FailureKind.VALIDATION: "VALIDATION_ERROR",
    FailureKind.NOT_FOUND: "RESOURCE_NOT_FOUND",
    FailureKind.CONFLICT: "CONFLICT",
}


# ─── Constructors ────────────────────────────────────────────────

def validation_failure(messages: list[str]) -> Failure:
    """Aggregate every violated rule into one Failure."""
    return Failure(
        reason="; ".join(messages),
        kind=FailureKind.VALIDATION,
        errors=tuple(messages),
    )


def not_found(resource_type: str, resource_id: object) -> Failure:
    return Failure(
        reason=f"{resource_type} '{resource_id}' not found",
        kind=FailureKind.NOT_FOUND,
    )


def conflict(message: str) -> Failure:
    return Failure(reason=message, kind=FailureKind.CONFLICT)
