"""SQLAlchemy ORM models for categories and their group privileges."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base

PRIVILEGE_TOPICS_READ = "topics:read"
PRIVILEGE_POSTS_EDIT = "posts:edit"
PRIVILEGE_POSTS_DELETE = "posts:delete"
PRIVILEGE_POSTS_PURGE = "posts:purge"
PRIVILEGE_POSTS_UPVOTE = "posts:upvote"
PRIVILEGE_POSTS_DOWNVOTE = "posts:downvote"
PRIVILEGE_MODERATE = "moderate"


class Category(Base):
    __tablename__ = "categories"

    cid: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)


class CategoryPrivilege(Base):
    """Grants *privilege* in category *cid* to every member of *group_name*."""

    __tablename__ = "category_privileges"
    __table_args__ = (
        UniqueConstraint(
            "cid", "privilege", "group_name",
            name="uq_category_privileges_cid_privilege_group",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cid: Mapped[int] = mapped_column(
        ForeignKey("categories.cid", ondelete="CASCADE"), nullable=False, index=True,
    )
    privilege: Mapped[str] = mapped_column(String(50), nullable=False)
    group_name: Mapped[str] = mapped_column(String(100), nullable=False)
