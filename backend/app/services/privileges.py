"""Category-scoped privilege checks.

Membership is resolved per call: every uid > 0 is implicitly in
``registered-users``, uid 0 (or a missing uid) is in ``guests``, and any
explicit rows in ``group_members`` are added on top.  Members of
``administrators`` hold every privilege everywhere.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from backend.app.models.category_record import (
    PRIVILEGE_MODERATE,
    PRIVILEGE_POSTS_DELETE,
    PRIVILEGE_POSTS_EDIT,
    PRIVILEGE_POSTS_PURGE,
    Category,
    CategoryPrivilege,
)
from backend.app.models.post_record import Post
from backend.app.models.user_record import (
    GROUP_ADMINISTRATORS,
    GROUP_GUESTS,
    GROUP_REGISTERED_USERS,
    GroupMember,
)

logger = logging.getLogger(__name__)


def get_user_groups(db: Session, uid: int | None) -> set[str]:
    """Return the implicit and explicit groups *uid* belongs to."""
    if not uid or uid <= 0:
        return {GROUP_GUESTS}
    rows = db.query(GroupMember.group_name).filter(GroupMember.uid == uid).all()
    return {GROUP_REGISTERED_USERS, *(name for (name,) in rows)}


def is_admin(db: Session, uid: int | None) -> bool:
    return GROUP_ADMINISTRATORS in get_user_groups(db, uid)


def categories_can(db: Session, privilege: str, cid: int | None, uid: int | None) -> bool:
    """Return True if *uid* holds *privilege* in category *cid*.

    Unknown categories grant nothing, not even to administrators.
    """
    if cid is None or db.get(Category, cid) is None:
        return False
    groups = get_user_groups(db, uid)
    if GROUP_ADMINISTRATORS in groups:
        return True
    grant = (
        db.query(CategoryPrivilege.id)
        .filter(
            CategoryPrivilege.cid == cid,
            CategoryPrivilege.privilege == privilege,
            CategoryPrivilege.group_name.in_(groups),
        )
        .first()
    )
    return grant is not None


def is_admin_or_moderator(db: Session, cid: int | None, uid: int | None) -> bool:
    if not uid or uid <= 0:
        return False
    return categories_can(db, PRIVILEGE_MODERATE, cid, uid)


def _owner_can(db: Session, privilege: str, post: Post, cid: int, uid: int | None) -> bool:
    if not uid or uid <= 0:
        return False
    if is_admin_or_moderator(db, cid, uid):
        return True
    return post.uid == uid and categories_can(db, privilege, cid, uid)


def can_edit_post(db: Session, post: Post, cid: int, uid: int | None) -> bool:
    return _owner_can(db, PRIVILEGE_POSTS_EDIT, post, cid, uid)


def can_delete_post(db: Session, post: Post, cid: int, uid: int | None) -> bool:
    return _owner_can(db, PRIVILEGE_POSTS_DELETE, post, cid, uid)


def can_purge_post(db: Session, post: Post, cid: int, uid: int | None) -> bool:
    return _owner_can(db, PRIVILEGE_POSTS_PURGE, post, cid, uid)
