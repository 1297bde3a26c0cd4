"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Validation, cache-key building, and state-transition rules are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
    - Boundary contracts (unit of work, cache, repository) live here as Protocols
      so the pipeline depends on shapes, not implementations
"""
