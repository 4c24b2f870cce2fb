"""Read access to topic fields for the post routes."""

from __future__ import annotations

import json

from sqlalchemy.orm import Session

from backend.app.models.topic_record import Topic


def decode_tags(raw: str | None) -> list[str]:
    """Decode the JSON tag column, tolerating empty or corrupt values."""
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    return [str(t) for t in tags] if isinstance(tags, list) else []


def topic_to_dict(topic: Topic) -> dict[str, object]:
    return {
        "tid": topic.tid,
        "cid": topic.cid,
        "uid": topic.uid,
        "title": topic.title,
        "tags": decode_tags(topic.tags),
        "thumb": topic.thumb,
        "main_pid": topic.main_pid,
    }


def get_topic_fields(db: Session, tid: int | None, fields: list[str]) -> dict[str, object] | None:
    """Return the requested *fields* of topic *tid*, or None if it does not exist.

    Unknown field names map to None.
    """
    if tid is None:
        return None
    topic = db.get(Topic, tid)
    if topic is None:
        return None
    data = topic_to_dict(topic)
    return {name: data.get(name) for name in fields}
