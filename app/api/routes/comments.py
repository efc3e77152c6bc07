from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser
from app.db.session import get_db
from app.schemas.comment import CommentData, CreateCommentRequest
from app.services.comment_service import CommentService

router = APIRouter(tags=["Comments"])


def get_comment_service(db: Annotated[Session, Depends(get_db)]) -> CommentService:
    return CommentService(db)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentData,
    status_code=status.HTTP_201_CREATED,
)
def submit_comment(
    post_id: str,
    body: CreateCommentRequest,
    user: CurrentUser,
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> CommentData:
    """Create a comment on a post.

    Returns:
        CommentData: The new comment with its author details.

    Raises:
        401 without a session, 400 for blank or oversized content, 404 if the
        post does not exist.
    """
    return service.submit_comment(post_id, body.content, user)


@router.delete("/comments/{comment_id}", response_model=CommentData)
def delete_comment(
    comment_id: str,
    user: CurrentUser,
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> CommentData:
    """Delete one of the caller's comments.

    Raises:
        401 without a session, 404 if the comment does not exist, 403 if the
        caller is not its author.
    """
    return service.delete_comment(comment_id, user)
