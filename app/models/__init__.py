from __future__ import annotations

from app.models.post import Comment, Like, Notification, NotificationType, Post
from app.models.user import AuthSession, User

__all__ = [
    "AuthSession",
    "Comment",
    "Like",
    "Notification",
    "NotificationType",
    "Post",
    "User",
]
