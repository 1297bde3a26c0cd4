"""Correlation IDs — one caller-visible id per HTTP request, carried into every pipeline log.

Invariants:
    - An incoming X-Correlation-ID is reused when it is a short token of safe characters
    - Otherwise a fresh id is generated; the request never runs without one
    - The id is echoed on every response the app produces, failures included
    - request.state.correlation_id holds the id for dependencies and error handlers

Design Decisions:
    - Caller-supplied ids are length- and charset-checked: they end up in log lines
      and response headers (ADR: no header or log injection)
"""

import logging
import re
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

_SAFE_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_correlation_id(header_value: str | None) -> str:
    if header_value and _SAFE_ID.fullmatch(header_value):
        return header_value
    return uuid.uuid4().hex


def correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def register_correlation_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def attach_correlation_id(request: Request, call_next):
        request.state.correlation_id = resolve_correlation_id(
            request.headers.get(CORRELATION_HEADER),
        )
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = request.state.correlation_id
        return response
