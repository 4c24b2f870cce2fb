"""SQLAlchemy ORM models for forum users, API tokens and group membership."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base

GUEST_UID = 0

GROUP_ADMINISTRATORS = "administrators"
GROUP_REGISTERED_USERS = "registered-users"
GROUP_GUESTS = "guests"


class User(Base):
    """A forum account. uid 0 is reserved for guests and never stored."""

    __tablename__ = "users"

    uid: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    reputation: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ApiToken(Base):
    """Bearer token bound to a single user."""

    __tablename__ = "api_tokens"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    uid: Mapped[int] = mapped_column(
        ForeignKey("users.uid", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class GroupMember(Base):
    """Explicit group membership (implicit groups are not stored)."""

    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_name", "uid", name="uq_group_members_group_uid"),
        Index("ix_group_members_uid", "uid"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    group_name: Mapped[str] = mapped_column(String(100), nullable=False)
    uid: Mapped[int] = mapped_column(
        ForeignKey("users.uid", ondelete="CASCADE"), nullable=False,
    )
