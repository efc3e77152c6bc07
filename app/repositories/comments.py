"""Comment queries.

Comments are always loaded together with their author so they can be
rendered without extra round trips.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.models import Comment


def create_comment(db: Session, *, content: str, post_id: str, user_id: str) -> Comment:
    comment = Comment(content=content, post_id=post_id, user_id=user_id)
    db.add(comment)
    # Flush so the id exists for the notification that references it.
    db.flush()
    return comment


def get_comment(db: Session, comment_id: str) -> Comment | None:
    stmt = select(Comment).options(joinedload(Comment.user)).where(Comment.id == comment_id)
    return db.scalar(stmt)


def delete_comment(db: Session, comment: Comment) -> None:
    db.delete(comment)
    db.flush()
