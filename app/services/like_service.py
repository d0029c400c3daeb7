"""Like toggling for articles and comments.

Each toggle runs read-check-mutate-recount in one transaction and reports
the count as persisted, never an in-memory increment. Unlike
notifications, likes cannot degrade silently: when a like table is missing
the toggle fails with ``LikesUnavailableError`` so the client is never told
a state that was not stored.
"""
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import LikesUnavailableError, TargetUnavailableError
from app.core.logging import get_logger
from app.db.probe import SchemaProbe
from app.db.session import atomic, utcnow
from app.models.article import Article, ArticleStatus
from app.models.comment import Comment, CommentStatus
from app.models.engagement import ArticleLike, CommentLike
from app.models.notification import NotificationType
from app.services.notification_service import create_notification

logger = get_logger(__name__)


@dataclass(frozen=True)
class LikeToggleResult:
    liked: bool
    count: int


@dataclass(frozen=True)
class LikeSummary:
    count: int
    liked: bool


class LikeStore:
    """Unique (target, user) rows in one like table."""

    def __init__(self, db: AsyncSession, model, target_column: str):
        self.db = db
        self.model = model
        self.target = getattr(model, target_column)
        self.target_column = target_column

    async def exists(self, target_id: UUID, user_id: UUID) -> bool:
        result = await self.db.execute(
            select(self.model.user_id).where(self.target == target_id, self.model.user_id == user_id)
        )
        return result.first() is not None

    async def insert(self, target_id: UUID, user_id: UUID) -> None:
        self.db.add(self.model(**{self.target_column: target_id, "user_id": user_id, "created_at": utcnow()}))
        await self.db.flush()

    async def delete(self, target_id: UUID, user_id: UUID) -> None:
        await self.db.execute(
            delete(self.model).where(self.target == target_id, self.model.user_id == user_id)
        )

    async def count(self, target_id: UUID) -> int:
        result = await self.db.execute(select(func.count()).select_from(self.model).where(self.target == target_id))
        return result.scalar() or 0


async def require_like_store(db: AsyncSession, model, target_column: str) -> LikeStore:
    if not await SchemaProbe(db).has_table(model.__tablename__):
        logger.warning("likes_unavailable", table=model.__tablename__)
        raise LikesUnavailableError()
    return LikeStore(db, model, target_column)


async def _flip(store: LikeStore, target_id: UUID, user_id: UUID) -> bool:
    """Delete the like if present, insert it otherwise. Returns the new state."""
    if await store.exists(target_id, user_id):
        await store.delete(target_id, user_id)
        return False
    await store.insert(target_id, user_id)
    return True


async def toggle_article_like(db: AsyncSession, article_id: UUID, user_id: UUID) -> LikeToggleResult:
    store = await require_like_store(db, ArticleLike, "article_id")
    async with atomic(db):
        # Row lock serializes concurrent toggles on the same article.
        article = (
            await db.execute(
                select(Article.status, Article.author_id).where(Article.id == article_id).with_for_update()
            )
        ).first()
        if article is None or article.status != ArticleStatus.PUBLISHED:
            raise TargetUnavailableError("There is nothing to like here.")

        liked = await _flip(store, article_id, user_id)
        if liked and article.author_id and article.author_id != user_id:
            await create_notification(
                db,
                recipient_id=article.author_id,
                actor_id=user_id,
                notification_type=NotificationType.ARTICLE_LIKE,
                article_id=article_id,
            )
        count = await store.count(article_id)

    logger.info("article_like_toggled", article_id=str(article_id), user_id=str(user_id), liked=liked, count=count)
    return LikeToggleResult(liked=liked, count=count)


async def toggle_comment_like(db: AsyncSession, comment_id: UUID, user_id: UUID) -> LikeToggleResult:
    store = await require_like_store(db, CommentLike, "comment_id")
    async with atomic(db):
        comment = (
            await db.execute(
                select(Comment.status, Comment.user_id, Comment.article_id)
                .where(Comment.id == comment_id)
                .with_for_update()
            )
        ).first()
        if comment is None or comment.status != CommentStatus.PUBLISHED:
            raise TargetUnavailableError("There is nothing to like here.")

        liked = await _flip(store, comment_id, user_id)
        if liked and comment.user_id and comment.user_id != user_id:
            await create_notification(
                db,
                recipient_id=comment.user_id,
                actor_id=user_id,
                notification_type=NotificationType.COMMENT_LIKE,
                article_id=comment.article_id,
                comment_id=comment_id,
            )
        count = await store.count(comment_id)

    logger.info("comment_like_toggled", comment_id=str(comment_id), user_id=str(user_id), liked=liked, count=count)
    return LikeToggleResult(liked=liked, count=count)


async def get_article_like_summary(db: AsyncSession, article_id: UUID, viewer_id: UUID | None = None) -> LikeSummary:
    """Like count and viewer state for display; zeros while likes are not migrated."""
    if not await SchemaProbe(db).has_table(ArticleLike.__tablename__):
        return LikeSummary(count=0, liked=False)
    store = LikeStore(db, ArticleLike, "article_id")
    count = await store.count(article_id)
    liked = await store.exists(article_id, viewer_id) if viewer_id else False
    return LikeSummary(count=count, liked=liked)
