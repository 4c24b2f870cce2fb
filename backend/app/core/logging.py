"""Structured logging baseline and event taxonomy.

Event taxonomy (minimum set)::

    app_start              — application process starting
    config_loaded          — settings resolved successfully
    db_initialized         — engine created, DB path resolved
    db_migration_started   — alembic upgrade beginning
    db_migration_succeeded — alembic upgrade completed
    db_migration_failed    — alembic upgrade error (with traceback)
    auth_rejected          — bearer token missing, unknown or unusable
    post_edited            — post content/metadata changed
    post_purged            — post removed permanently
    post_deleted           — post soft-deleted
    post_restored          — soft-deleted post restored
    post_voted             — vote cast, changed or removed
    post_bookmarked        — bookmark added
    post_unbookmarked      — bookmark removed
    request_failed         — domain error returned to the client

Rules:
    - Never log API tokens.
    - Log ids and content *lengths*, not raw post content.

Usage::

    from backend.app.core.logging import log_event
    log_event(logger, "info", "post_voted", pid=12, uid=3, delta=1)
"""

import logging
import sys

# Canonical event names for grep-ability and observability.
EVENT_APP_START = "app_start"
EVENT_CONFIG_LOADED = "config_loaded"
EVENT_DB_INITIALIZED = "db_initialized"
EVENT_DB_MIGRATION_STARTED = "db_migration_started"
EVENT_DB_MIGRATION_SUCCEEDED = "db_migration_succeeded"
EVENT_DB_MIGRATION_FAILED = "db_migration_failed"
EVENT_AUTH_REJECTED = "auth_rejected"
EVENT_POST_EDITED = "post_edited"
EVENT_POST_PURGED = "post_purged"
EVENT_POST_DELETED = "post_deleted"
EVENT_POST_RESTORED = "post_restored"
EVENT_POST_VOTED = "post_voted"
EVENT_POST_BOOKMARKED = "post_bookmarked"
EVENT_POST_UNBOOKMARKED = "post_unbookmarked"
EVENT_REQUEST_FAILED = "request_failed"


_HANDLER_ATTR = "_forum_write_api"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logger with a simple structured format.

    Safe to call multiple times — only adds the handler once and
    restores it if Alembic's ``fileConfig()`` removes it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Check if our handler is already attached
    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    **kwargs: object,
) -> None:
    """Emit a structured log line with consistent ``event_name: key=value`` format.

    Parameters
    ----------
    logger:
        The logger instance (provides the component via ``logger.name``).
    level:
        Log level name — ``"info"``, ``"warning"``, ``"error"``, or ``"exception"``.
    event_name:
        Canonical event name (e.g. ``"post_voted"``).
    **kwargs:
        Arbitrary key-value pairs appended as ``key=value``.
    """
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    log_fn(message)
