"""Request guards shared by the post routes."""

from http import HTTPStatus

from fastapi import Depends, Header, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.api.responses import ApiError
from backend.app.core.errors import normalize_missing_params
from backend.app.db.session import get_db
from backend.app.services import posts
from backend.app.services.identity import Identity, InvalidTokenError, resolve_identity


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise ApiError.from_status(HTTPStatus.UNAUTHORIZED)
    return token.strip()


def get_identity(
    authorization: str | None = Header(default=None),
    fallback_uid: int | None = Query(default=None, alias="_uid"),
    db: Session = Depends(get_db),
) -> Identity:
    """Resolve the caller; anonymous when no Authorization header is sent."""
    token = _bearer_token(authorization)
    try:
        return resolve_identity(db, token, fallback_uid)
    except InvalidTokenError:
        raise ApiError.from_status(HTTPStatus.UNAUTHORIZED) from None


def require_user(identity: Identity = Depends(get_identity)) -> Identity:
    if identity.effective_uid is None:
        raise ApiError.from_status(HTTPStatus.UNAUTHORIZED)
    return identity


def validate_pid(pid: str, db: Session = Depends(get_db)) -> str:
    """404 unless the path pid names an existing post."""
    if not posts.exists(db, pid):
        raise ApiError.from_status(HTTPStatus.NOT_FOUND)
    return pid


def check_required(fields: list[str], body: BaseModel) -> None:
    """400 listing every field of *fields* the client did not send."""
    missing = [name for name in fields if name not in body.model_fields_set]
    if missing:
        raise ApiError(normalize_missing_params(missing))
