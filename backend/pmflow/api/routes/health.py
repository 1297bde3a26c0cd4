"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the database or the cache is unreachable

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from the
      load balancer (ADR: production readiness)
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from pmflow.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "pmflow-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — database and cache connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    cache = getattr(request.app.state, "cache", None)
    cache_ok = await cache.ping() if cache else False
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "cache": "healthy" if cache_ok else "unavailable",
    }
    if not (db_ok and cache_ok):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
