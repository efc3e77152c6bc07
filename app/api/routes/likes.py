from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser
from app.core.rate_limit import LIKE_BUCKET, UNLIKE_BUCKET, rate_limit
from app.db.session import get_db
from app.models import User
from app.schemas.like import LikeInfo
from app.services.like_service import LikeService

router = APIRouter(tags=["Likes"])

like_rate_limited = rate_limit(LIKE_BUCKET)
unlike_rate_limited = rate_limit(UNLIKE_BUCKET)


def get_like_service(db: Annotated[Session, Depends(get_db)]) -> LikeService:
    return LikeService(db)


@router.get("/posts/{post_id}/likes", response_model=LikeInfo)
def get_likes(
    post_id: str,
    user: CurrentUser,
    service: Annotated[LikeService, Depends(get_like_service)],
) -> LikeInfo:
    """Return the like count of a post and whether the caller liked it.

    Raises:
        401 without a session, 404 if the post does not exist.
    """
    return service.get_like_info(post_id, user)


@router.post("/posts/{post_id}/likes")
def like_post(
    post_id: str,
    user: Annotated[User, Depends(like_rate_limited)],
    service: Annotated[LikeService, Depends(get_like_service)],
) -> Response:
    """Like a post. Idempotent; responds with an empty body.

    Raises:
        401 without a session, 429 when the client IP exhausted the like
        budget, 404 if the post does not exist.
    """
    service.like(post_id, user)
    return Response(status_code=200)


@router.delete("/posts/{post_id}/likes")
def unlike_post(
    post_id: str,
    user: Annotated[User, Depends(unlike_rate_limited)],
    service: Annotated[LikeService, Depends(get_like_service)],
) -> Response:
    """Remove the caller's like. Idempotent; responds with an empty body."""
    service.unlike(post_id, user)
    return Response(status_code=200)
