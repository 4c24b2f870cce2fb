"""Resolve the caller identity from a bearer token.

Two kinds of token are accepted:

- a per-user token from ``api_tokens``, which attaches that user;
- the configured master token, which attaches no user and instead trusts
  the ``_uid`` supplied by the caller as the acting uid.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from backend.app.core.logging import EVENT_AUTH_REJECTED, log_event
from backend.app.core.settings import settings
from backend.app.models.user_record import ApiToken, User

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Raised when a bearer token is present but matches nothing."""


@dataclass(frozen=True)
class AuthenticatedUser:
    uid: int
    username: str


@dataclass(frozen=True)
class Identity:
    """The caller of one request.

    ``user`` is set when a user token was presented; ``uid`` is the
    fallback identifier used when no user is attached.
    """

    user: AuthenticatedUser | None = None
    uid: int | None = None

    @property
    def effective_uid(self) -> int | None:
        if self.user is not None:
            return self.user.uid
        return self.uid


ANONYMOUS = Identity()


def _is_master_token(token: str) -> bool:
    if not settings.is_master_token_configured:
        return False
    master = settings.master_token.get_secret_value()  # type: ignore[union-attr]
    return hmac.compare_digest(token.encode(), master.encode())


def resolve_identity(db: Session, token: str | None, fallback_uid: int | None = None) -> Identity:
    """Map a bearer token (or its absence) to an :class:`Identity`.

    Raises:
        InvalidTokenError: If *token* is neither the master token nor a
            known user token, or the token's user no longer exists.
    """
    if not token:
        return ANONYMOUS

    if _is_master_token(token):
        return Identity(user=None, uid=fallback_uid)

    row = db.get(ApiToken, token)
    user = db.get(User, row.uid) if row is not None else None
    if user is None:
        log_event(logger, "warning", EVENT_AUTH_REJECTED, reason="unknown_token")
        raise InvalidTokenError("Unknown or revoked API token")
    return Identity(user=AuthenticatedUser(uid=user.uid, username=user.username))
