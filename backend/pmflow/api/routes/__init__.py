"""Route Modules — one file per aggregate/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to the dispatcher)

Design Decisions:
    - Explicit registration in main.py over auto-discovery (ADR: anti-pattern)
"""
