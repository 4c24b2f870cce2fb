"""Post write routes: edit, purge, restore, delete, vote, bookmark.

Each handler checks its inputs, makes one call into the posts service and
wraps the result.  Domain errors propagate to the global handlers.
"""

import logging
from http import HTTPStatus

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.app.api.dependencies import (
    check_required,
    get_identity,
    require_user,
    validate_pid,
)
from backend.app.api.responses import ok, respond
from backend.app.api.responses import handle as handle_error
from backend.app.db.session import get_db
from backend.app.models.category_record import PRIVILEGE_TOPICS_READ
from backend.app.models.post_api import (
    ApiEnvelope,
    BookmarkResponse,
    EditPostRequest,
    VoteRequest,
    build_edit_payload,
)
from backend.app.services import posts, privileges, topics
from backend.app.services.identity import Identity

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Edit / purge
# ---------------------------------------------------------------------------


@router.put("/{pid}", response_model=ApiEnvelope)
def edit_post(
    pid: str,
    body: EditPostRequest | None = None,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    body = body or EditPostRequest()
    check_required(["content"], body)
    payload = build_edit_payload(identity.effective_uid, pid, body)
    result = posts.edit(db, payload)
    db.commit()
    return ok(result)


@router.delete("/{pid}", response_model=ApiEnvelope)
def purge_post(
    identity: Identity = Depends(require_user),
    pid: str = Depends(validate_pid),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    result = posts.purge(db, pid, identity.effective_uid)
    db.commit()
    return ok(result)


# ---------------------------------------------------------------------------
# Soft delete / restore
# ---------------------------------------------------------------------------


@router.put("/{pid}/state", response_model=ApiEnvelope)
def restore_post(
    identity: Identity = Depends(require_user),
    pid: str = Depends(validate_pid),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    result = posts.restore(db, pid, identity.effective_uid)
    db.commit()
    return ok(result)


@router.delete("/{pid}/state", response_model=ApiEnvelope)
def delete_post(
    identity: Identity = Depends(require_user),
    pid: str = Depends(validate_pid),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    result = posts.delete(db, pid, identity.effective_uid)
    db.commit()
    return ok(result)


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------


@router.post("/{pid}/vote", response_model=ApiEnvelope)
def vote_post(
    pid: str,
    body: VoteRequest | None = None,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    """Upvote on a positive delta, downvote on a negative one, unvote on zero."""
    body = body or VoteRequest()
    check_required(["delta"], body)
    uid = identity.effective_uid
    delta = body.delta or 0
    if delta > 0:
        result = posts.upvote(db, pid, uid)
    elif delta < 0:
        result = posts.downvote(db, pid, uid)
    else:
        result = posts.unvote(db, pid, uid)
    db.commit()
    return ok(result)


@router.delete("/{pid}/vote", response_model=ApiEnvelope)
def unvote_post(
    pid: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> ApiEnvelope:
    result = posts.unvote(db, pid, identity.effective_uid)
    db.commit()
    return ok(result)


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


def _bookmark_uid(identity: Identity) -> int | None:
    uid = identity.effective_uid
    if not uid or uid <= 0:
        return None
    return uid


@router.post("/{pid}/bookmark", response_model=BookmarkResponse)
def bookmark_post(
    pid: str,
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
) -> BookmarkResponse | JSONResponse:
    try:
        uid = _bookmark_uid(identity)
        if uid is None:
            return respond(HTTPStatus.UNAUTHORIZED)

        post_data = posts.get_post_fields(db, pid, ["pid", "tid"])
        if not post_data or not post_data.get("pid"):
            return respond(HTTPStatus.NOT_FOUND)

        topic_data = topics.get_topic_fields(db, post_data.get("tid"), ["cid"])
        cid = topic_data.get("cid") if topic_data else None
        if not privileges.categories_can(db, PRIVILEGE_TOPICS_READ, cid, uid):
            return respond(HTTPStatus.FORBIDDEN)

        posts.bookmark(db, pid, uid)
        db.commit()
        return BookmarkResponse(bookmarked=True)
    except Exception as exc:
        return handle_error(exc, operation=f"POST bookmark pid={pid}")


@router.delete("/{pid}/bookmark", response_model=BookmarkResponse)
def unbookmark_post(
    pid: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> BookmarkResponse | JSONResponse:
    try:
        uid = _bookmark_uid(identity)
        if uid is None:
            return respond(HTTPStatus.UNAUTHORIZED)

        posts.unbookmark(db, pid, uid)
        db.commit()
        return BookmarkResponse(bookmarked=False)
    except Exception as exc:
        return handle_error(exc, operation=f"DELETE bookmark pid={pid}")
