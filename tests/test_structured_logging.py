"""Tests for the structured logging baseline and post event logging."""

import logging

import pytest
from backend.app.core.logging import (
    EVENT_AUTH_REJECTED,
    EVENT_POST_BOOKMARKED,
    EVENT_POST_DELETED,
    EVENT_POST_EDITED,
    EVENT_POST_RESTORED,
    EVENT_POST_VOTED,
    log_event,
    setup_logging,
)
from backend.app.models.post_api import EditPayload
from backend.app.services import posts
from backend.app.services.identity import InvalidTokenError, resolve_identity
from conftest import Forum
from sqlalchemy.orm import Session


class TestLogEventFormat:
    def test_event_name_and_kwargs(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "my_event", foo="bar", count=42)
        assert "my_event: foo=bar count=42" in caplog.text

    def test_bare_event(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            log_event(logging.getLogger("test.bare"), "info", "bare_event")
        assert caplog.records[-1].getMessage() == "bare_event"

    def test_warning_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            log_event(logging.getLogger("test.warn"), "warning", "warn_event", detail="x")
        assert caplog.records[0].levelname == "WARNING"

    def test_unknown_level_falls_back_to_info(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            log_event(logging.getLogger("test.odd"), "shout", "odd_event")
        assert caplog.records[0].levelname == "INFO"


class TestSetupLogging:
    def test_handler_added_once(self) -> None:
        setup_logging()
        setup_logging()
        ours = [h for h in logging.getLogger().handlers if getattr(h, "_forum_write_api", False)]
        assert len(ours) == 1


class TestPostEvents:
    def test_edit_logs_length_not_content(
        self, db: Session, forum: Forum, caplog: pytest.LogCaptureFixture,
    ) -> None:
        secret = "The secret roadmap for next quarter"
        with caplog.at_level(logging.INFO):
            posts.edit(db, EditPayload(uid=forum.bob, pid=str(forum.reply), content=secret))
        assert EVENT_POST_EDITED in caplog.text
        assert f"content_len={len(secret)}" in caplog.text
        assert "secret roadmap" not in caplog.text

    def test_vote_and_bookmark_events(
        self, db: Session, forum: Forum, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO):
            posts.upvote(db, str(forum.reply), forum.alice)
            posts.bookmark(db, str(forum.reply), forum.alice)
        assert f"{EVENT_POST_VOTED}: pid={forum.reply} uid={forum.alice}" in caplog.text
        assert EVENT_POST_BOOKMARKED in caplog.text

    def test_delete_and_restore_events(
        self, db: Session, forum: Forum, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO):
            posts.delete(db, str(forum.reply), forum.bob)
            posts.restore(db, str(forum.reply), forum.bob)
        assert f"{EVENT_POST_DELETED}: pid={forum.reply} uid={forum.bob}" in caplog.text
        assert f"{EVENT_POST_RESTORED}: pid={forum.reply} uid={forum.bob}" in caplog.text

    def test_unknown_token_logs_rejection_without_token(
        self, db: Session, forum: Forum, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING), pytest.raises(InvalidTokenError):
            resolve_identity(db, "not-a-real-token")
        assert f"{EVENT_AUTH_REJECTED}: reason=unknown_token" in caplog.text
        assert "not-a-real-token" not in caplog.text
