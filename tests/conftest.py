"""Shared fixtures: in-memory forum database, seeded forum, API client."""

import os
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault(
    "APP_DB_PATH", os.path.join(tempfile.mkdtemp(prefix="forum-api-"), "forum.db"),
)
os.environ.setdefault("MASTER_TOKEN", "test-master-token")

import pytest  # noqa: E402
from backend.app.db.base import Base  # noqa: E402
from backend.app.db.engine import enable_sqlite_foreign_keys  # noqa: E402
from backend.app.db.session import get_db  # noqa: E402
from backend.app.main import app  # noqa: E402
from backend.app.models.category_record import (  # noqa: E402
    PRIVILEGE_MODERATE,
    PRIVILEGE_POSTS_DELETE,
    PRIVILEGE_POSTS_DOWNVOTE,
    PRIVILEGE_POSTS_EDIT,
    PRIVILEGE_POSTS_UPVOTE,
    PRIVILEGE_TOPICS_READ,
    Category,
    CategoryPrivilege,
)
from backend.app.models.post_record import Post  # noqa: E402
from backend.app.models.topic_record import Topic  # noqa: E402
from backend.app.models.user_record import (  # noqa: E402
    GROUP_ADMINISTRATORS,
    GROUP_GUESTS,
    GROUP_REGISTERED_USERS,
    ApiToken,
    GroupMember,
    User,
)
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

MASTER_TOKEN = os.environ["MASTER_TOKEN"]

_T0 = datetime(2026, 1, 10, 9, 0, 0, tzinfo=UTC)


@pytest.fixture()
def db() -> Iterator[Session]:
    """Yield a session on a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@dataclass
class Forum:
    """Ids of the seeded rows.

    alice and bob are registered users, carol is an administrator and
    dave moderates the general category.  ``general`` is readable and
    writable by registered users, ``staff`` grants them nothing.
    """

    alice: int
    bob: int
    carol: int
    dave: int
    general: int
    staff: int
    topic: int
    staff_topic: int
    main_post: int
    reply: int
    staff_post: int


def _user(db: Session, username: str, token: str) -> int:
    user = User(username=username, joined_at=_T0)
    db.add(user)
    db.flush()
    db.add(ApiToken(token=token, uid=user.uid, created_at=_T0))
    return user.uid


def _grant(db: Session, cid: int, group: str, *privileges: str) -> None:
    for privilege in privileges:
        db.add(CategoryPrivilege(cid=cid, privilege=privilege, group_name=group))


@pytest.fixture()
def forum(db: Session) -> Forum:
    alice = _user(db, "alice", "alice-token")
    bob = _user(db, "bob", "bob-token")
    carol = _user(db, "carol", "carol-token")
    dave = _user(db, "dave", "dave-token")
    db.add(GroupMember(group_name=GROUP_ADMINISTRATORS, uid=carol))
    db.add(GroupMember(group_name="general-mods", uid=dave))

    general = Category(name="General")
    staff = Category(name="Staff")
    db.add_all([general, staff])
    db.flush()
    _grant(
        db, general.cid, GROUP_REGISTERED_USERS,
        PRIVILEGE_TOPICS_READ,
        PRIVILEGE_POSTS_EDIT,
        PRIVILEGE_POSTS_DELETE,
        PRIVILEGE_POSTS_UPVOTE,
        PRIVILEGE_POSTS_DOWNVOTE,
    )
    _grant(db, general.cid, GROUP_GUESTS, PRIVILEGE_TOPICS_READ)
    _grant(db, general.cid, "general-mods", PRIVILEGE_MODERATE)

    topic = Topic(cid=general.cid, uid=alice, title="Welcome aboard", created_at=_T0)
    staff_topic = Topic(cid=staff.cid, uid=carol, title="Staff only", created_at=_T0)
    db.add_all([topic, staff_topic])
    db.flush()

    main_post = Post(tid=topic.tid, uid=alice, content="Hello everyone, welcome!", created_at=_T0)
    reply = Post(tid=topic.tid, uid=bob, content="Thanks for having me here.", created_at=_T0)
    staff_post = Post(tid=staff_topic.tid, uid=carol, content="Internal notes only.", created_at=_T0)
    db.add_all([main_post, reply, staff_post])
    db.flush()
    topic.main_pid = main_post.pid
    staff_topic.main_pid = staff_post.pid
    db.commit()

    return Forum(
        alice=alice,
        bob=bob,
        carol=carol,
        dave=dave,
        general=general.cid,
        staff=staff.cid,
        topic=topic.tid,
        staff_topic=staff_topic.tid,
        main_post=main_post.pid,
        reply=reply.pid,
        staff_post=staff_post.pid,
    )


@pytest.fixture()
def client(db: Session) -> Iterator[TestClient]:
    """API client whose requests all run against the ``db`` fixture session."""

    def _override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
