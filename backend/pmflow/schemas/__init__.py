"""Pydantic Schemas — request bodies and DTOs at the API boundary.

Invariants:
    - Schemas validate shape at the system boundary; business rules run in the pipeline
    - DTOs are what query handlers cache (JSON round-trip safe)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
