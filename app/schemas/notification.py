"""Pydantic schemas for Notification."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class NotificationActor(BaseModel):
    id: UUID
    name: str
    avatar_url: str | None = None


class ArticleRef(BaseModel):
    id: UUID
    slug: str
    title: str


class CommentRef(BaseModel):
    id: UUID
    content: str


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    article_id: UUID | None = None
    comment_id: UUID | None = None
    created_at: datetime
    read_at: datetime | None = None
    actor: NotificationActor | None = None
    article: ArticleRef | None = None
    comment: CommentRef | None = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    unread_count: int
    next_cursor: UUID | None = None


class MarkReadRequest(BaseModel):
    ids: list[UUID] | None = None


class UnreadCountResponse(BaseModel):
    count: int
