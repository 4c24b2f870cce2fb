"""Post domain operations behind the write API.

All functions operate on a caller-supplied SQLAlchemy ``Session`` and only
``flush()``; the route that called them owns the commit.  Post ids arrive
as they appear in the request path (strings) and are parsed here.

Raises:
    PostNotFoundError: The pid does not parse or names no post.
    NoPrivilegesError: The caller lacks the category privilege.
    InvalidDataError: Content, title or tags fail the posting rules.
    PostStateError: The post is already in the requested state.
    NotLoggedInError: A guest tried to vote or bookmark.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.errors import (
    InvalidDataError,
    NoPrivilegesError,
    NotLoggedInError,
    PostNotFoundError,
    PostStateError,
)
from backend.app.core.logging import (
    EVENT_POST_BOOKMARKED,
    EVENT_POST_DELETED,
    EVENT_POST_EDITED,
    EVENT_POST_PURGED,
    EVENT_POST_RESTORED,
    EVENT_POST_UNBOOKMARKED,
    EVENT_POST_VOTED,
    log_event,
)
from backend.app.core.settings import settings
from backend.app.models.category_record import (
    PRIVILEGE_POSTS_DOWNVOTE,
    PRIVILEGE_POSTS_UPVOTE,
)
from backend.app.models.post_api import (
    BookmarkedPost,
    BookmarkResult,
    EditedTopic,
    EditPayload,
    EditResult,
    PostStateResult,
    VotedPost,
    VoteResult,
    VoterSummary,
)
from backend.app.models.post_record import Post, PostBookmark, PostVote
from backend.app.models.topic_record import Topic
from backend.app.models.user_record import GUEST_UID, User
from backend.app.services import privileges
from backend.app.services.topics import decode_tags

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _parse_pid(pid: str | int) -> int | None:
    try:
        value = int(str(pid).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def _get_post(db: Session, pid: str | int) -> Post:
    parsed = _parse_pid(pid)
    post = db.get(Post, parsed) if parsed is not None else None
    if post is None:
        raise PostNotFoundError(f"Post not found: pid={pid}")
    return post


def _get_topic(db: Session, post: Post) -> Topic:
    topic = db.get(Topic, post.tid)
    if topic is None:
        raise PostNotFoundError(f"Topic not found for post: pid={post.pid}", code="no-topic")
    return topic


def _require_login(uid: int | None) -> int:
    if not uid or uid <= 0:
        raise NotLoggedInError("You must be logged in to do this")
    return uid


def _flush(db: Session, operation: str) -> None:
    """Flush pending changes, turning unique-constraint races into conflicts."""
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("db_write_failed: operation=%s reason=integrity", operation)
        raise PostStateError(
            f"Concurrent update during '{operation}', please retry",
            code="conflict",
        ) from exc


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def post_to_dict(post: Post) -> dict[str, object]:
    return {
        "pid": post.pid,
        "tid": post.tid,
        "uid": post.uid,
        "content": post.content,
        "handle": post.handle,
        "deleted": post.deleted,
        "upvotes": post.upvotes,
        "downvotes": post.downvotes,
        "votes": post.votes,
        "bookmarks": post.bookmarks,
    }


def exists(db: Session, pid: str | int) -> bool:
    parsed = _parse_pid(pid)
    return parsed is not None and db.get(Post, parsed) is not None


def get_post_fields(db: Session, pid: str | int, fields: list[str]) -> dict[str, object] | None:
    """Return the requested *fields* of a post, or None when it does not exist."""
    parsed = _parse_pid(pid)
    post = db.get(Post, parsed) if parsed is not None else None
    if post is None:
        return None
    data = post_to_dict(post)
    return {name: data.get(name) for name in fields}


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------


def _check_edit_duration(db: Session, post: Post, cid: int, uid: int) -> None:
    duration = settings.post_edit_duration
    if not duration or privileges.is_admin_or_moderator(db, cid, uid):
        return
    age = (_utcnow() - _as_utc(post.created_at)).total_seconds()
    if age > duration:
        raise NoPrivilegesError(
            f"You are only allowed to edit posts for {duration} second(s) after posting",
            code="post-edit-duration-expired",
            params=[duration],
        )


def _check_content(content: str) -> str:
    length = len(content.strip())
    if length < settings.minimum_post_length:
        raise InvalidDataError(
            f"Please enter a longer post. Posts should contain at least "
            f"{settings.minimum_post_length} character(s).",
            code="content-too-short",
            params=[settings.minimum_post_length],
        )
    if length > settings.maximum_post_length:
        raise InvalidDataError(
            f"Please enter a shorter post. Posts can't be longer than "
            f"{settings.maximum_post_length} character(s).",
            code="content-too-long",
            params=[settings.maximum_post_length],
        )
    return content


def _check_title(title: str) -> str:
    title = title.strip()
    if len(title) < settings.minimum_title_length:
        raise InvalidDataError(
            f"Please enter a longer title. Titles should contain at least "
            f"{settings.minimum_title_length} character(s).",
            code="title-too-short",
            params=[settings.minimum_title_length],
        )
    if len(title) > settings.maximum_title_length:
        raise InvalidDataError(
            f"Please enter a shorter title. Titles can't be longer than "
            f"{settings.maximum_title_length} character(s).",
            code="title-too-long",
            params=[settings.maximum_title_length],
        )
    return title


def _normalize_tags(tags: list[str]) -> list[str]:
    cleaned: list[str] = []
    for tag in tags:
        value = str(tag).strip().lower()
        if value and value not in cleaned:
            cleaned.append(value)
    if len(cleaned) > settings.maximum_tags_per_topic:
        raise InvalidDataError(
            f"Please enter fewer tags. Topics can't have more than "
            f"{settings.maximum_tags_per_topic} tag(s).",
            code="too-many-tags",
            params=[settings.maximum_tags_per_topic],
        )
    return cleaned


def edit(db: Session, payload: EditPayload) -> EditResult:
    """Apply an edit to a post and, for a topic's main post, to the topic.

    ``title``, ``tags`` and ``topic_thumb`` are ignored unless the post is
    the main post of its topic; ``handle`` is ignored unless the post was
    made by a guest.
    """
    post = _get_post(db, payload.pid)
    topic = _get_topic(db, post)
    uid = payload.uid

    if not privileges.can_edit_post(db, post, topic.cid, uid):
        raise NoPrivilegesError("You do not have enough privileges for this action.")
    _check_edit_duration(db, post, topic.cid, uid)
    content = _check_content(payload.content)

    is_main_post = topic.main_pid == post.pid
    renamed = False
    if is_main_post:
        if payload.title is not None:
            title = _check_title(payload.title)
            renamed = title != topic.title
            topic.title = title
        if payload.tags is not None:
            topic.tags = json.dumps(_normalize_tags(payload.tags))
        if payload.topic_thumb is not None:
            topic.thumb = payload.topic_thumb

    if payload.handle and post.uid == GUEST_UID:
        post.handle = payload.handle

    post.content = content
    post.edited_at = _utcnow()
    post.editor_uid = uid
    _flush(db, "edit")

    log_event(
        logger, "info", EVENT_POST_EDITED,
        pid=post.pid,
        uid=uid,
        content_len=len(content),
        renamed=renamed,
    )
    return EditResult(
        pid=post.pid,
        tid=post.tid,
        uid=post.uid,
        content=post.content,
        handle=post.handle,
        edited=_as_utc(post.edited_at).isoformat(),
        editor=post.editor_uid,
        topic=EditedTopic(
            tid=topic.tid,
            cid=topic.cid,
            title=topic.title,
            tags=decode_tags(topic.tags),
            thumb=topic.thumb,
            renamed=renamed,
            is_main_post=is_main_post,
        ),
    )


# ---------------------------------------------------------------------------
# Purge / delete / restore
# ---------------------------------------------------------------------------


def purge(db: Session, pid: str | int, uid: int | None) -> None:
    """Permanently remove a post together with its votes and bookmarks."""
    post = _get_post(db, pid)
    topic = _get_topic(db, post)
    if not privileges.can_purge_post(db, post, topic.cid, uid):
        raise NoPrivilegesError("You do not have enough privileges for this action.")

    db.query(PostVote).filter(PostVote.pid == post.pid).delete()
    db.query(PostBookmark).filter(PostBookmark.pid == post.pid).delete()
    if topic.main_pid == post.pid:
        topic.main_pid = None
    purged_pid = post.pid
    db.delete(post)
    _flush(db, "purge")
    log_event(logger, "info", EVENT_POST_PURGED, pid=purged_pid, uid=uid)


def _set_deleted(db: Session, pid: str | int, uid: int | None, deleted: bool) -> PostStateResult:
    post = _get_post(db, pid)
    topic = _get_topic(db, post)
    if not privileges.can_delete_post(db, post, topic.cid, uid):
        raise NoPrivilegesError("You do not have enough privileges for this action.")
    if post.deleted == deleted:
        code = "post-already-deleted" if deleted else "post-already-restored"
        raise PostStateError(f"Post is already {'deleted' if deleted else 'restored'}", code=code)

    post.deleted = deleted
    post.deleter_uid = uid if deleted else None
    _flush(db, "delete" if deleted else "restore")
    log_event(
        logger, "info", EVENT_POST_DELETED if deleted else EVENT_POST_RESTORED,
        pid=post.pid,
        uid=uid,
    )
    return PostStateResult(
        pid=post.pid, tid=post.tid, deleted=post.deleted, deleter=post.deleter_uid,
    )


def delete(db: Session, pid: str | int, uid: int | None) -> PostStateResult:
    """Soft-delete a post."""
    return _set_deleted(db, pid, uid, True)


def restore(db: Session, pid: str | int, uid: int | None) -> PostStateResult:
    """Undo a soft delete."""
    return _set_deleted(db, pid, uid, False)


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------


def _check_can_vote(db: Session, post: Post, uid: int, value: int) -> None:
    if not settings.voting_enabled:
        raise InvalidDataError(
            "Voting is disabled on this forum", code="reputation-system-disabled",
        )
    if value < 0 and not settings.downvoting_enabled:
        raise InvalidDataError(
            "Downvoting is disabled on this forum", code="downvoting-disabled",
        )
    if post.deleted:
        raise PostStateError("This post has been deleted", code="post-deleted")
    if post.uid == uid:
        raise InvalidDataError("You cannot vote on your own post", code="self-vote")
    privilege = PRIVILEGE_POSTS_UPVOTE if value > 0 else PRIVILEGE_POSTS_DOWNVOTE
    if not privileges.categories_can(db, privilege, _get_topic(db, post).cid, uid):
        raise NoPrivilegesError("You do not have enough privileges for this action.")


def _vote(db: Session, pid: str | int, uid: int | None, value: int) -> VoteResult:
    """Set the caller's vote on a post to *value* (+1, -1 or 0 to remove)."""
    voter = _require_login(uid)
    post = _get_post(db, pid)
    if value:
        _check_can_vote(db, post, voter, value)

    existing = (
        db.query(PostVote)
        .filter(PostVote.pid == post.pid, PostVote.uid == voter)
        .one_or_none()
    )
    previous = existing.value if existing is not None else 0

    if previous != value:
        if previous > 0:
            post.upvotes -= 1
        elif previous < 0:
            post.downvotes -= 1
        if value > 0:
            post.upvotes += 1
        elif value < 0:
            post.downvotes += 1

        if value == 0:
            db.delete(existing)
        elif existing is None:
            db.add(PostVote(pid=post.pid, uid=voter, value=value, voted_at=_utcnow()))
        else:
            existing.value = value
            existing.voted_at = _utcnow()

    owner = db.get(User, post.uid) if post.uid != GUEST_UID else None
    if owner is not None:
        owner.reputation += value - previous
    _flush(db, "vote")

    log_event(
        logger, "info", EVENT_POST_VOTED,
        pid=post.pid,
        uid=voter,
        previous=previous,
        value=value,
    )
    return VoteResult(
        post=VotedPost(
            pid=post.pid,
            uid=post.uid,
            upvotes=post.upvotes,
            downvotes=post.downvotes,
            votes=post.votes,
        ),
        user=VoterSummary(reputation=owner.reputation if owner is not None else 0),
        fromuid=voter,
        upvote=value > 0,
        downvote=value < 0,
    )


def upvote(db: Session, pid: str | int, uid: int | None) -> VoteResult:
    return _vote(db, pid, uid, 1)


def downvote(db: Session, pid: str | int, uid: int | None) -> VoteResult:
    return _vote(db, pid, uid, -1)


def unvote(db: Session, pid: str | int, uid: int | None) -> VoteResult:
    return _vote(db, pid, uid, 0)


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


def _find_bookmark(db: Session, pid: int, uid: int) -> PostBookmark | None:
    return (
        db.query(PostBookmark)
        .filter(PostBookmark.pid == pid, PostBookmark.uid == uid)
        .one_or_none()
    )


def bookmark(db: Session, pid: str | int, uid: int | None) -> BookmarkResult:
    owner = _require_login(uid)
    post = _get_post(db, pid)
    if _find_bookmark(db, post.pid, owner) is not None:
        raise PostStateError("You have already bookmarked this post", code="already-bookmarked")

    db.add(PostBookmark(pid=post.pid, uid=owner, bookmarked_at=_utcnow()))
    post.bookmarks += 1
    _flush(db, "bookmark")
    log_event(logger, "info", EVENT_POST_BOOKMARKED, pid=post.pid, uid=owner)
    return BookmarkResult(
        post=BookmarkedPost(pid=post.pid, bookmarks=post.bookmarks), isBookmarked=True,
    )


def unbookmark(db: Session, pid: str | int, uid: int | None) -> BookmarkResult:
    owner = _require_login(uid)
    post = _get_post(db, pid)
    existing = _find_bookmark(db, post.pid, owner)
    if existing is None:
        raise PostStateError("You have already unbookmarked this post", code="already-unbookmarked")

    db.delete(existing)
    post.bookmarks = max(post.bookmarks - 1, 0)
    _flush(db, "unbookmark")
    log_event(logger, "info", EVENT_POST_UNBOOKMARKED, pid=post.pid, uid=owner)
    return BookmarkResult(
        post=BookmarkedPost(pid=post.pid, bookmarks=post.bookmarks), isBookmarked=False,
    )
