"""Pydantic models for the post write API request and response bodies."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class EditPostRequest(BaseModel):
    """Body of ``PUT /:pid``. Field presence is checked by the route."""

    content: str | None = None
    handle: str | None = None
    title: str | None = None
    topic_thumb: str | None = None
    tags: list[str] | None = None


class VoteRequest(BaseModel):
    """Body of ``POST /:pid/vote``. Only the sign of ``delta`` matters."""

    delta: float | None = None


# ---------------------------------------------------------------------------
# Domain payloads
# ---------------------------------------------------------------------------


class EditPayload(BaseModel):
    """Edit request handed to the posts service.

    Optional fields stay ``None`` unless the client sent a value for them.
    """

    uid: int
    pid: str
    content: str
    options: dict[str, Any] = Field(default_factory=dict)
    handle: str | None = None
    title: str | None = None
    topic_thumb: str | None = None
    tags: list[str] | None = None


def build_edit_payload(uid: int, pid: str, body: EditPostRequest) -> EditPayload:
    """Assemble an :class:`EditPayload`, copying optional fields only when set.

    An empty tag list is kept so an edit can clear a topic's tags; empty
    strings are treated as not sent.
    """
    payload = EditPayload(uid=uid, pid=pid, content=body.content or "", options={})
    for name in ("handle", "title", "topic_thumb", "tags"):
        value = getattr(body, name)
        if value is not None and value != "":
            setattr(payload, name, value)
    return payload


# ---------------------------------------------------------------------------
# Domain results
# ---------------------------------------------------------------------------


class EditedTopic(BaseModel):
    tid: int
    cid: int
    title: str
    tags: list[str] = Field(default_factory=list)
    thumb: str | None = None
    renamed: bool = False
    is_main_post: bool = False


class EditResult(BaseModel):
    pid: int
    tid: int
    uid: int
    content: str
    handle: str | None = None
    edited: str | None = None
    editor: int | None = None
    topic: EditedTopic


class PostStateResult(BaseModel):
    pid: int
    tid: int
    deleted: bool
    deleter: int | None = None


class VotedPost(BaseModel):
    pid: int
    uid: int
    upvotes: int
    downvotes: int
    votes: int


class VoterSummary(BaseModel):
    """Reputation of the post owner after the vote."""

    reputation: int


class VoteResult(BaseModel):
    post: VotedPost
    user: VoterSummary
    fromuid: int
    upvote: bool
    downvote: bool


class BookmarkedPost(BaseModel):
    pid: int
    bookmarks: int


class BookmarkResult(BaseModel):
    post: BookmarkedPost
    isBookmarked: bool


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class ApiEnvelope(BaseModel):
    """Standard success envelope for non-bookmark endpoints."""

    code: str = "ok"
    payload: Any = Field(default_factory=dict)


class BookmarkResponse(BaseModel):
    status: Literal["ok"] = "ok"
    bookmarked: bool
