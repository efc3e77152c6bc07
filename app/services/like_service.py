"""Like reads and mutations.

Each mutation runs in one transaction: the like row and its notification are
written or removed together. A like row is the only record of "liked"; the
notification is a side effect and never created for self-likes.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.errors import NotFoundAppError
from app.models import NotificationType, User
from app.repositories import notifications as notification_repo
from app.repositories import posts as post_repo
from app.schemas.like import LikeInfo

logger = logging.getLogger(__name__)


def _post_not_found(post_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="post_not_found",
        message="Post not found",
        details={"resource": "post", "resource_id": post_id},
    )


class LikeService:
    """Like operations for a single request's database session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_like_info(self, post_id: str, user: User) -> LikeInfo:
        """Return the like count of a post and whether ``user`` liked it.

        Raises:
            NotFoundAppError: If the post does not exist.
        """
        with self._db.begin():
            if not post_repo.post_exists(self._db, post_id):
                raise _post_not_found(post_id)
            return LikeInfo(
                likes=post_repo.count_likes(self._db, post_id),
                is_liked_by_user=post_repo.has_liked(self._db, user.id, post_id),
            )

    def like(self, post_id: str, user: User) -> None:
        """Like a post; repeating the call changes nothing.

        The owner is notified only when this call created the like and the
        owner is someone else.

        Raises:
            NotFoundAppError: If the post does not exist.
        """
        with self._db.begin():
            owner_id = post_repo.get_post_owner_id(self._db, post_id)
            if owner_id is None:
                raise _post_not_found(post_id)

            created = post_repo.insert_like_if_absent(self._db, user.id, post_id)
            notified = created and owner_id != user.id
            if notified:
                notification_repo.create_notification(
                    self._db,
                    issuer_id=user.id,
                    recipient_id=owner_id,
                    post_id=post_id,
                    type=NotificationType.LIKE,
                )

        logger.info(
            "like.created" if created else "like.unchanged",
            extra={"post_id": post_id, "user_id": user.id, "notified": notified},
        )

    def unlike(self, post_id: str, user: User) -> None:
        """Remove the caller's like and the matching notification.

        Unliking a post that was never liked is a no-op.

        Raises:
            NotFoundAppError: If the post does not exist.
        """
        with self._db.begin():
            owner_id = post_repo.get_post_owner_id(self._db, post_id)
            if owner_id is None:
                raise _post_not_found(post_id)

            removed = post_repo.delete_likes(self._db, user.id, post_id)
            notification_repo.delete_like_notifications(
                self._db,
                issuer_id=user.id,
                recipient_id=owner_id,
                post_id=post_id,
            )

        logger.info(
            "like.removed",
            extra={"post_id": post_id, "user_id": user.id, "rows": removed},
        )
