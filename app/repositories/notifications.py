"""Notification writes.

Callers decide whether a notification is due; these helpers only persist or
remove rows inside the caller's transaction.
"""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.models import Notification, NotificationType


def create_notification(
    db: Session,
    *,
    issuer_id: str,
    recipient_id: str,
    type: NotificationType,
    post_id: str | None = None,
    comment_id: str | None = None,
) -> Notification:
    notification = Notification(
        issuer_id=issuer_id,
        recipient_id=recipient_id,
        post_id=post_id,
        comment_id=comment_id,
        type=type,
    )
    db.add(notification)
    return notification


def delete_like_notifications(db: Session, *, issuer_id: str, recipient_id: str, post_id: str) -> int:
    result = db.execute(
        delete(Notification).where(
            Notification.issuer_id == issuer_id,
            Notification.recipient_id == recipient_id,
            Notification.post_id == post_id,
            Notification.type == NotificationType.LIKE,
        )
    )
    return result.rowcount or 0


def delete_comment_notifications(db: Session, comment_id: str) -> int:
    result = db.execute(
        delete(Notification).where(
            Notification.comment_id == comment_id,
            Notification.type == NotificationType.COMMENT,
        )
    )
    return result.rowcount or 0
