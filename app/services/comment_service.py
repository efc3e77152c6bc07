"""Comment creation and deletion."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.errors import AuthorizationAppError, NotFoundAppError
from app.models import NotificationType, User
from app.repositories import comments as comment_repo
from app.repositories import notifications as notification_repo
from app.repositories import posts as post_repo
from app.schemas.comment import CommentData, validate_comment_content

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: Session) -> None:
        self._db = db

    def submit_comment(self, post_id: str, content: str, user: User) -> CommentData:
        """Create a comment and, for someone else's post, a COMMENT notification.

        Args:
            post_id: Target post.
            content: Raw comment text; trimmed and length checked.
            user: Authenticated author.

        Returns:
            The new comment with its author details.

        Raises:
            ValidationAppError: If content is blank or too long.
            NotFoundAppError: If the post does not exist.
        """
        validated = validate_comment_content(content)

        with self._db.begin():
            owner_id = post_repo.get_post_owner_id(self._db, post_id)
            if owner_id is None:
                raise NotFoundAppError(
                    code="post_not_found",
                    message="Post not found",
                    details={"resource": "post", "resource_id": post_id},
                )

            comment = comment_repo.create_comment(
                self._db, content=validated, post_id=post_id, user_id=user.id
            )
            notified = owner_id != user.id
            if notified:
                notification_repo.create_notification(
                    self._db,
                    issuer_id=user.id,
                    recipient_id=owner_id,
                    post_id=post_id,
                    comment_id=comment.id,
                    type=NotificationType.COMMENT,
                )
            data = CommentData.from_comment(comment)

        logger.info(
            "comment.created",
            extra={
                "comment_id": data.id,
                "post_id": post_id,
                "user_id": user.id,
                "notified": notified,
                "char_count": len(validated),
            },
        )
        return data

    def delete_comment(self, comment_id: str, user: User) -> CommentData:
        """Delete a comment authored by ``user`` together with its notification.

        Returns:
            The deleted comment with its author details.

        Raises:
            NotFoundAppError: If the comment does not exist.
            AuthorizationAppError: If ``user`` is not the author.
        """
        with self._db.begin():
            comment = comment_repo.get_comment(self._db, comment_id)
            if comment is None:
                raise NotFoundAppError(
                    code="comment_not_found",
                    message="Comment not found",
                    details={"resource": "comment", "resource_id": comment_id},
                )
            if comment.user_id != user.id:
                logger.warning(
                    "comment.delete_forbidden",
                    extra={"comment_id": comment_id, "user_id": user.id},
                )
                raise AuthorizationAppError(
                    code="forbidden",
                    message="Only the author can delete this comment",
                )

            data = CommentData.from_comment(comment)
            removed = notification_repo.delete_comment_notifications(self._db, comment_id)
            comment_repo.delete_comment(self._db, comment)

        logger.info(
            "comment.deleted",
            extra={
                "comment_id": comment_id,
                "post_id": data.post_id,
                "user_id": user.id,
                "notifications_removed": removed,
            },
        )
        return data
