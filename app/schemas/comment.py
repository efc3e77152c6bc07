"""Pydantic schemas for comment endpoints.

``CommentData`` is the display form returned by both comment actions: the
comment plus the author fields a client needs to render it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.core.errors import ValidationAppError
from app.models import Comment, User


class CreateCommentRequest(BaseModel):
    """Request body for submitting a comment.

    Only the type is checked here; content rules live in
    ``validate_comment_content`` so they produce the application error shape.
    """

    content: str = Field(..., description="Comment text.")


class CommentContent(BaseModel):
    """Validated comment content: trimmed, non-empty and length bounded."""

    content: str

    @field_validator("content")
    @classmethod
    def _check_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Required")
        if len(value) > settings.app.comment_max_chars:
            raise ValueError(f"Must be at most {settings.app.comment_max_chars} characters")
        return value


def validate_comment_content(content: str) -> str:
    """Return normalized comment content or raise ValidationAppError.

    Examples:
        >>> validate_comment_content("  nice shot  ")
        'nice shot'
    """
    try:
        return CommentContent(content=content).content
    except ValidationError as exc:
        first = exc.errors()[0]
        raise ValidationAppError(
            code="invalid_comment_content",
            message=str(first.get("msg", "Invalid comment content")).removeprefix("Value error, "),
            details={
                "max_value": settings.app.comment_max_chars,
                "actual_value": len(content.strip()),
            },
        ) from exc


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentAuthor(_CamelModel):
    id: str
    username: str
    display_name: str
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "CommentAuthor":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )


class CommentData(_CamelModel):
    id: str
    content: str
    post_id: str
    created_at: datetime
    user: CommentAuthor

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentData":
        return cls(
            id=comment.id,
            content=comment.content,
            post_id=comment.post_id,
            created_at=comment.created_at,
            user=CommentAuthor.from_user(comment.user),
        )
