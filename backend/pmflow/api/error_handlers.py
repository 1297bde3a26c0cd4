"""Error Handlers — map faults escaping the pipeline to the REST error envelope.

Invariants:
    - PMFlowError → its own http_status and to_response() body
    - RequestValidationError (malformed body / path / query) → 400 with the same
      envelope a pipeline validation Failure produces, so clients parse one shape
    - Exception (catch-all) → 500, never leaks internal details
    - Business failures never reach this module; api.deps.respond maps them

Design Decisions:
    - Log level follows ErrorSeverity: cancellations are not operational errors and
      must not page anyone (ADR: alert on faults, not on client disconnects)
    - Registered from main via register_error_handlers (ADR: import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pmflow.api.correlation import correlation_id
from pmflow.core.errors import ErrorSeverity, PMFlowError
from pmflow.core.result import validation_failure

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PMFlowError, handle_pmflow_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_pmflow_error(request: Request, exc: PMFlowError) -> JSONResponse:
    if exc.context.request_id is None:
        exc.context.request_id = correlation_id(request)
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "request_type": exc.context.request_type,
            "request_id": exc.context.request_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    messages = [_describe(e) for e in exc.errors()]
    logger.warning(
        f"Rejected malformed request on {request.url.path}: {len(messages)} problem(s)",
        extra={"request_id": correlation_id(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=validation_failure(messages).to_response(),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
        extra={"request_id": correlation_id(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _describe(error: dict) -> str:
    # loc starts with "body" / "path" / "query"; the field is what clients recognise
    location = [str(part) for part in error.get("loc", ()) if part not in ("body",)]
    field = ".".join(location)
    return f"{field}: {error.get('msg', 'invalid value')}" if field else error.get("msg", "")
