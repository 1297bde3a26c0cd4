"""Infrastructure Layer — database, cache, and logging adapters.

Invariants:
    - Adapters implement the Protocols in core/repository_protocols.py
    - Driver exceptions are mapped to DatabaseError / CacheError before leaving this layer

Design Decisions:
    - One adapter per external resource (ADR: single responsibility)
"""
