"""Post and like queries."""

from __future__ import annotations

from sqlalchemy import delete, exists, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Like, Post


def get_post_owner_id(db: Session, post_id: str) -> str | None:
    """Return the owner of ``post_id``, or None when the post does not exist."""
    return db.scalar(select(Post.user_id).where(Post.id == post_id))


def post_exists(db: Session, post_id: str) -> bool:
    return bool(db.scalar(select(exists().where(Post.id == post_id))))


def count_likes(db: Session, post_id: str) -> int:
    return int(db.scalar(select(func.count()).select_from(Like).where(Like.post_id == post_id)) or 0)


def has_liked(db: Session, user_id: str, post_id: str) -> bool:
    stmt = select(exists().where(Like.user_id == user_id, Like.post_id == post_id))
    return bool(db.scalar(stmt))


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        return pg_insert
    if dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert

        return sqlite_insert
    return None


def insert_like_if_absent(db: Session, user_id: str, post_id: str) -> bool:
    """Insert the (user, post) like unless it already exists.

    Must run inside an open transaction.

    Returns:
        True when a row was inserted, False when the like already existed.
    """
    dialect_insert = _dialect_insert(db.get_bind().dialect.name)
    if dialect_insert is not None:
        stmt = (
            dialect_insert(Like)
            .values(user_id=user_id, post_id=post_id)
            .on_conflict_do_nothing(index_elements=["user_id", "post_id"])
        )
        result = db.execute(stmt)
        return result.rowcount == 1

    # Generic path: a savepoint keeps a duplicate-key failure from aborting the
    # surrounding transaction.
    try:
        with db.begin_nested():
            db.execute(insert(Like).values(user_id=user_id, post_id=post_id))
    except IntegrityError:
        return False
    return True


def delete_likes(db: Session, user_id: str, post_id: str) -> int:
    """Delete the caller's like on a post. Returns the number of rows removed."""
    result = db.execute(delete(Like).where(Like.user_id == user_id, Like.post_id == post_id))
    return result.rowcount or 0
