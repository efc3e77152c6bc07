"""Pydantic schemas for like endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LikeInfo(BaseModel):
    """Like state of a post as seen by the requesting user."""

    model_config = ConfigDict(populate_by_name=True)

    likes: int = Field(..., ge=0, description="Total number of likes on the post.")
    is_liked_by_user: bool = Field(
        ...,
        alias="isLikedByUser",
        description="Whether the requesting user has liked the post.",
    )
