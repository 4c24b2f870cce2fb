"""Response envelopes and the generic error responder."""

import logging
import uuid

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backend.app.core.errors import (
    ForumError,
    NormalizedError,
    normalize_forum_error,
    normalize_status,
    normalize_unknown_error,
)
from backend.app.models.post_api import ApiEnvelope

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised from routes and dependencies to short-circuit with an error body."""

    def __init__(self, error: NormalizedError) -> None:
        super().__init__(error.user_message)
        self.error = error

    @classmethod
    def from_status(cls, status: int) -> "ApiError":
        return cls(normalize_status(status))


def ok(payload: object = None) -> ApiEnvelope:
    """Wrap a domain result in the success envelope."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    return ApiEnvelope(code="ok", payload=payload if payload is not None else {})


def error_json(error: NormalizedError) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content=error.to_response())


def respond(status: int) -> JSONResponse:
    """Error response for a bare status code."""
    return error_json(normalize_status(status))


def handle(exc: Exception, *, operation: str) -> JSONResponse:
    """Map any exception raised while serving a request onto a response."""
    if isinstance(exc, ApiError):
        return error_json(exc.error)
    correlation_id = str(uuid.uuid4())
    if isinstance(exc, ForumError):
        error = normalize_forum_error(exc, operation=operation, correlation_id=correlation_id)
    else:
        error = normalize_unknown_error(exc, operation=operation, correlation_id=correlation_id)
    return error_json(error)
