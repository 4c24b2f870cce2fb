"""Domain error hierarchy and centralized error normalization.

Every error surfaced to an API client passes through this module so that:
- Each failure carries a stable short code and an HTTP status
- No stack traces or tokens reach the response body
- Detailed info is logged for debugging
"""

import logging
from dataclasses import dataclass, field
from http import HTTPStatus

from backend.app.core.logging import EVENT_REQUEST_FAILED, log_event

logger = logging.getLogger(__name__)

# Envelope ``code`` values keyed by HTTP status.
STATUS_CODE_NAMES: dict[int, str] = {
    HTTPStatus.OK: "ok",
    HTTPStatus.BAD_REQUEST: "params-missing",
    HTTPStatus.UNAUTHORIZED: "not-authorised",
    HTTPStatus.FORBIDDEN: "forbidden",
    HTTPStatus.NOT_FOUND: "not-found",
    HTTPStatus.CONFLICT: "conflict",
    HTTPStatus.INTERNAL_SERVER_ERROR: "internal-server-error",
}

STATUS_MESSAGES: dict[int, str] = {
    HTTPStatus.BAD_REQUEST: "Required parameters were missing from this API call",
    HTTPStatus.UNAUTHORIZED: "A valid login session or API token is required",
    HTTPStatus.FORBIDDEN: "You are not authorised to make this call",
    HTTPStatus.NOT_FOUND: "Invalid API call",
    HTTPStatus.CONFLICT: "The resource is not in a state that allows this call",
    HTTPStatus.INTERNAL_SERVER_ERROR: "An unexpected error occurred. Please try again.",
}


def status_code_name(status: int) -> str:
    """Return the envelope code for *status*, falling back to the 500 name."""
    return STATUS_CODE_NAMES.get(status, STATUS_CODE_NAMES[HTTPStatus.INTERNAL_SERVER_ERROR])


# ---------------------------------------------------------------------------
# Domain errors raised by the posts/topics/privileges services
# ---------------------------------------------------------------------------


class ForumError(Exception):
    """Base class for expected domain failures.

    ``code`` is the short machine-readable reason (e.g. ``"no-privileges"``);
    ``params`` carries any values the message refers to.
    """

    http_status: int = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(self, message: str | None = None, *, code: str | None = None, params: object = None) -> None:
        if code is not None:
            self.code = code
        self.message = message or self.code
        self.params = params
        super().__init__(self.message)


class InvalidDataError(ForumError):
    http_status = HTTPStatus.BAD_REQUEST
    code = "invalid-data"


class NotLoggedInError(ForumError):
    http_status = HTTPStatus.UNAUTHORIZED
    code = "not-logged-in"


class NoPrivilegesError(ForumError):
    http_status = HTTPStatus.FORBIDDEN
    code = "no-privileges"


class PostNotFoundError(ForumError):
    http_status = HTTPStatus.NOT_FOUND
    code = "no-post"


class PostStateError(ForumError):
    """The post is already in the requested state (deleted, bookmarked...)."""

    http_status = HTTPStatus.CONFLICT
    code = "invalid-state"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedError:
    """Standardized error representation for API responses."""

    user_message: str
    error_category: str
    http_status: int = 500
    params: object = field(default=None)
    reason: str | None = None

    @property
    def code(self) -> str:
        return status_code_name(self.http_status)

    def to_response(self) -> dict[str, object]:
        body: dict[str, object] = {
            "code": self.code,
            "message": self.user_message,
            "params": self.params if self.params is not None else {},
        }
        if self.reason is not None:
            body["reason"] = self.reason
        return body


def normalize_forum_error(
    exc: ForumError,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Map a domain error onto its HTTP status and client-facing message."""
    log_event(
        logger, "info", EVENT_REQUEST_FAILED,
        operation=operation,
        error_category="domain",
        reason=exc.code,
        http_status=int(exc.http_status),
        correlation_id=correlation_id or "N/A",
    )
    return NormalizedError(
        user_message=exc.message,
        error_category="domain",
        http_status=int(exc.http_status),
        params=exc.params,
        reason=exc.code,
    )


def normalize_missing_params(missing: list[str]) -> NormalizedError:
    """Build the 400 response for required body fields that were not sent."""
    return NormalizedError(
        user_message=(
            f"{STATUS_MESSAGES[HTTPStatus.BAD_REQUEST]}: {', '.join(missing)}"
        ),
        error_category="validation",
        http_status=HTTPStatus.BAD_REQUEST,
        params=missing,
    )


def normalize_validation_error(
    messages: list[str],
) -> NormalizedError:
    """Normalize request validation errors into a single client message."""
    joined = "; ".join(messages)
    return NormalizedError(
        user_message=f"Validation failed: {joined}",
        error_category="validation",
        http_status=HTTPStatus.BAD_REQUEST,
        params=messages,
    )


def normalize_status(status: int) -> NormalizedError:
    """Canonical error for a bare status code (401/403/404 checks)."""
    return NormalizedError(
        user_message=STATUS_MESSAGES.get(
            status, STATUS_MESSAGES[HTTPStatus.INTERNAL_SERVER_ERROR],
        ),
        error_category="status",
        http_status=int(status),
    )


def normalize_unknown_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize an unexpected error into a safe generic message."""
    log_event(
        logger, "exception", "unknown_error",
        operation=operation,
        error_category="unknown",
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    return NormalizedError(
        user_message=STATUS_MESSAGES[HTTPStatus.INTERNAL_SERVER_ERROR],
        error_category="unknown",
        http_status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )
