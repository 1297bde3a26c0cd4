"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes only build request objects and call the dispatcher

Design Decisions:
    - Thin routes delegate to the pipeline (ADR: impureim sandwich)
"""
