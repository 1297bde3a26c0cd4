"""pmflow API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Every route reaches the domain through app.state.dispatcher, never directly
    - Database, cache and dispatcher are built once in the lifespan and torn down on exit
    - CORS configured from settings (not hardcoded)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
      (ADR: FastAPI lifespan)
    - The registry is frozen before the first request: handler wiring is fixed
      at startup, a late registration is a bug (ADR: explicit registration)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pmflow.api.correlation import CORRELATION_HEADER, register_correlation_middleware
from pmflow.api.error_handlers import register_error_handlers
from pmflow.api.routes import health, organizations, project_items, projects, sprints, tasks
from pmflow.config import get_settings
from pmflow.infrastructure.cache import build_cache
from pmflow.infrastructure.database import close_db, init_db
from pmflow.infrastructure.observability import setup_logging
from pmflow.services.register_requests import build_registry
from pmflow.services.request_dispatch import RequestDispatcher, build_pipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    cache = build_cache(settings)
    app.state.cache = cache
    app.state.dispatcher = RequestDispatcher(
        build_registry(), build_pipeline(settings), manager.unit_of_work, cache,
    )
    logger.info("pmflow API started")
    yield
    logger.info("pmflow API shutting down")
    await cache.close()
    await close_db()


app = FastAPI(title="pmflow API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER],
)
register_correlation_middleware(app)

register_error_handlers(app)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(organizations.router)
app.include_router(organizations.users_router)
app.include_router(projects.router)
app.include_router(sprints.router)
app.include_router(tasks.router)
app.include_router(tasks.time_router)
app.include_router(project_items.risks_router)
app.include_router(project_items.issues_router)
app.include_router(project_items.documents_router)
app.include_router(project_items.allocations_router)
