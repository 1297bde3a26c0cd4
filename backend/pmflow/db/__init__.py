"""Database package — declarative Base and standalone session factory.

Invariants:
    - Single declarative Base for all ORM models

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
