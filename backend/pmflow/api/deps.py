"""API Dependencies — dispatcher lookup and Result → HTTP response mapping.

Invariants:
    - Success → 2xx with the value JSON-encoded (204 carries no body)
    - Failure → 400 / 404 / 409 by FailureKind, body from Failure.to_response()
    - Faults are not handled here; they reach the global error handlers
"""

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from pmflow.api.correlation import correlation_id
from pmflow.core.result import FailureKind, Result
from pmflow.services.request_dispatch import RequestDispatcher

_FAILURE_STATUS = {
    FailureKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def get_dispatcher(request: Request) -> RequestDispatcher:
    """FastAPI dependency: the lifespan's dispatcher, bound to this request's correlation id."""
    dispatcher: RequestDispatcher = request.app.state.dispatcher
    request_id = correlation_id(request)
    return dispatcher.bind(request_id) if request_id else dispatcher


def respond(result: Result, status_code: int = status.HTTP_200_OK) -> Any:
    if not result.is_success:
        return JSONResponse(
            status_code=_FAILURE_STATUS[result.kind], content=result.to_response(),
        )
    if status_code == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result.value))
