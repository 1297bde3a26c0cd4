"""Services Layer — request pipeline, dispatcher, registry, and per-aggregate handlers.

Invariants:
    - Handlers split by aggregate (one file per aggregate)
    - Request routing uses an explicit registry built at startup (no auto-discovery)

Design Decisions:
    - Pipeline stages are small classes with one async __call__ (ADR: no god objects)
"""
