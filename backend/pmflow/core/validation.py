"""Declarative Validation Rules — constraint lists evaluated by the Validation stage.

Invariants:
    - All functions are PURE: no IO, no DB, no cache, no side effects
    - validate() evaluates EVERY rule and returns every violated message (never first-error-wins)
    - Optional-field rules pass when the field is None; only required() fails on absence
    - Cross-field rules pass when either side is None

Design Decisions:
    - Rule = message + predicate over the whole request: one shape covers single-field
      and cross-field constraints (ADR: the stage never needs to know which kind it runs)
    - Builder functions (required, max_length, ...) read like the rule table they encode
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable

_MISSING = object()


@dataclass(frozen=True)
class Rule:
    """One constraint: passes(request) must be True or message is reported."""
    message: str
    passes: Callable[[Any], bool]


RuleSet = tuple[Rule, ...]


def validate(request: object, rules: RuleSet) -> list[str]:
    """Return the message of every violated rule, in rule order."""
    return [rule.message for rule in rules if not rule.passes(request)]


def _value(request: object, field: str) -> Any:
    return getattr(request, field, _MISSING)


def _optional(field: str, check: Callable[[Any], bool]) -> Callable[[Any], bool]:
    def passes(request: object) -> bool:
        value = _value(request, field)
        if value is None or value is _MISSING:
            return True
        return check(value)
    return passes


# ─── Single-field rules ──────────────────────────────────────────

def required(field: str, message: str) -> Rule:
    """Present, not None, and not blank (strings) / nil UUID."""
    def passes(request: object) -> bool:
        value = _value(request, field)
        if value is None or value is _MISSING:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if getattr(value, "int", None) == 0:  # nil UUID
            return False
        return True
    return Rule(message, passes)


def max_length(field: str, limit: int, message: str) -> Rule:
    return Rule(message, _optional(field, lambda v: len(v) <= limit))


def matches(field: str, regex: str, message: str) -> Rule:
    compiled = re.compile(regex)
    return Rule(message, _optional(field, lambda v: bool(compiled.fullmatch(v))))


def one_of(field: str, allowed: type[Enum] | tuple, message: str) -> Rule:
    """Enum membership — accepts the member itself or its raw value."""
    if isinstance(allowed, type) and issubclass(allowed, Enum):
        values = {m.value for m in allowed}
    else:
        values = set(allowed)
    return Rule(
        message,
        _optional(field, lambda v: getattr(v, "value", v) in values),
    )


def in_range(
    field: str,
    message: str,
    *,
    gt: float | None = None,
    ge: float | None = None,
    lt: float | None = None,
    le: float | None = None,
) -> Rule:
    def check(value: float) -> bool:
        if gt is not None and not value > gt:
            return False
        if ge is not None and not value >= ge:
            return False
        if lt is not None and not value < lt:
            return False
        if le is not None and not value <= le:
            return False
        return True
    return Rule(message, _optional(field, check))


def not_in_future(
    field: str, message: str, today: Callable[[], date] | None = None,
) -> Rule:
    clock = today or (lambda: datetime.now(timezone.utc).date())
    return Rule(message, _optional(field, lambda v: v <= clock()))


# ─── Cross-field rules ───────────────────────────────────────────

def after(later: str, earlier: str, message: str) -> Rule:
    """later > earlier, e.g. end_date after start_date."""
    def passes(request: object) -> bool:
        end, start = _value(request, later), _value(request, earlier)
        if end in (None, _MISSING) or start in (None, _MISSING):
            return True
        return end > start
    return Rule(message, passes)


def both_or_neither(first: str, second: str, message: str) -> Rule:
    """Paired optional fields, e.g. budget amount and currency."""
    def passes(request: object) -> bool:
        a = _value(request, first) not in (None, _MISSING)
        b = _value(request, second) not in (None, _MISSING)
        return a == b
    return Rule(message, passes)
