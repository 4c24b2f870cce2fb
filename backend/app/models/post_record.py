"""SQLAlchemy ORM models for posts, votes and bookmarks."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base


class Post(Base):
    """A single post; ``deleted`` is the soft-delete flag."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_tid", "tid"),
        Index("ix_posts_uid", "uid"),
    )

    pid: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tid: Mapped[int] = mapped_column(
        ForeignKey("topics.tid", ondelete="CASCADE"), nullable=False,
    )
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Display name for guest posts (uid 0)
    handle: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    editor_uid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0",
    )
    deleter_uid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    upvotes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    downvotes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    bookmarks: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )

    @property
    def votes(self) -> int:
        return self.upvotes - self.downvotes


class PostVote(Base):
    """One row per (post, voter); ``value`` is +1 or -1."""

    __tablename__ = "post_votes"
    __table_args__ = (
        UniqueConstraint("pid", "uid", name="uq_post_votes_pid_uid"),
        CheckConstraint("value IN (-1, 1)", name="value"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pid: Mapped[int] = mapped_column(
        ForeignKey("posts.pid", ondelete="CASCADE"), nullable=False,
    )
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    voted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class PostBookmark(Base):
    __tablename__ = "post_bookmarks"
    __table_args__ = (
        UniqueConstraint("pid", "uid", name="uq_post_bookmarks_pid_uid"),
        Index("ix_post_bookmarks_uid", "uid"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pid: Mapped[int] = mapped_column(
        ForeignKey("posts.pid", ondelete="CASCADE"), nullable=False,
    )
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    bookmarked_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
