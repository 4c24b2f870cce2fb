"""create forum tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("uid", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("reputation", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "api_tokens",
        sa.Column("token", sa.String(128), primary_key=True),
        sa.Column(
            "uid", sa.Integer(),
            sa.ForeignKey("users.uid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_api_tokens_uid", "api_tokens", ["uid"])
    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("group_name", sa.String(100), nullable=False),
        sa.Column(
            "uid", sa.Integer(),
            sa.ForeignKey("users.uid", ondelete="CASCADE"), nullable=False,
        ),
        sa.UniqueConstraint("group_name", "uid", name="uq_group_members_group_uid"),
    )
    op.create_index("ix_group_members_uid", "group_members", ["uid"])

    op.create_table(
        "categories",
        sa.Column("cid", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
    )
    op.create_table(
        "category_privileges",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "cid", sa.Integer(),
            sa.ForeignKey("categories.cid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("privilege", sa.String(50), nullable=False),
        sa.Column("group_name", sa.String(100), nullable=False),
        sa.UniqueConstraint(
            "cid", "privilege", "group_name",
            name="uq_category_privileges_cid_privilege_group",
        ),
    )
    op.create_index("ix_category_privileges_cid", "category_privileges", ["cid"])

    op.create_table(
        "topics",
        sa.Column("tid", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "cid", sa.Integer(),
            sa.ForeignKey("categories.cid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("thumb", sa.String(2048), nullable=True),
        sa.Column("main_pid", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_topics_cid", "topics", ["cid"])

    op.create_table(
        "posts",
        sa.Column("pid", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "tid", sa.Integer(),
            sa.ForeignKey("topics.tid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("handle", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("edited_at", sa.DateTime(), nullable=True),
        sa.Column("editor_uid", sa.Integer(), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("deleter_uid", sa.Integer(), nullable=True),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bookmarks", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_posts_tid", "posts", ["tid"])
    op.create_index("ix_posts_uid", "posts", ["uid"])

    op.create_table(
        "post_votes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "pid", sa.Integer(),
            sa.ForeignKey("posts.pid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("voted_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("pid", "uid", name="uq_post_votes_pid_uid"),
        sa.CheckConstraint("value IN (-1, 1)", name="ck_post_votes_value"),
    )
    op.create_table(
        "post_bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "pid", sa.Integer(),
            sa.ForeignKey("posts.pid", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("bookmarked_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("pid", "uid", name="uq_post_bookmarks_pid_uid"),
    )
    op.create_index("ix_post_bookmarks_uid", "post_bookmarks", ["uid"])


def downgrade() -> None:
    op.drop_table("post_bookmarks")
    op.drop_table("post_votes")
    op.drop_table("posts")
    op.drop_table("topics")
    op.drop_table("category_privileges")
    op.drop_table("categories")
    op.drop_table("group_members")
    op.drop_table("api_tokens")
    op.drop_table("users")
