"""Global exception handlers.

    ApiError               → the error body it carries
    ForumError             → status of the domain error
    RequestValidationError → 400 with the field messages
    Exception              → 500, details logged only
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.api.responses import ApiError, error_json, handle
from backend.app.core.errors import ForumError, normalize_validation_error

logger = logging.getLogger(__name__)


def _operation(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return error_json(exc.error)

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
        return handle(exc, operation=_operation(request))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning("request_validation_failed: path=%s", request.url.path)
        messages = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        return error_json(normalize_validation_error(messages))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log details, return a safe generic message."""
        return handle(exc, operation=_operation(request))
