"""Pydantic schemas for Comment."""
from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, field_validator

from app.core.config import settings


class CommentCreate(BaseModel):
    content: Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=1, max_length=settings.MAX_COMMENT_LENGTH),
    ]
    parent_id: UUID | None = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def blank_parent_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CommentAuthor(BaseModel):
    id: UUID
    name: str
    avatar_url: str | None = None


class CommentResponse(BaseModel):
    id: UUID
    article_id: UUID
    user_id: UUID
    parent_id: UUID | None = None
    content: str
    status: str
    created_at: datetime
    updated_at: datetime | None = None
    user: CommentAuthor | None = None
    like_count: int = 0
    viewer_has_liked: bool = False
    replies: list["CommentResponse"] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class LikeToggleResponse(BaseModel):
    liked: bool
    like_count: int


class LikeSummaryResponse(BaseModel):
    like_count: int
    viewer_has_liked: bool


class CommentSubmit(BaseModel):
    """Raw request body; length and blank checks happen in the comment service."""

    content: str = ""
    parent_id: str | None = None
