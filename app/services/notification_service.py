"""Notification creation and inbox queries.

Notifications are a best-effort feature: when the ``notifications`` table
has not been migrated yet every operation degrades to a no-op or an empty
result instead of failing the request that triggered it.
"""
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.logging import get_logger
from app.db.probe import SchemaProbe
from app.db.session import async_session_maker, atomic, utcnow
from app.models.comment import Comment
from app.models.notification import Notification
from app.schemas.notification import ArticleRef, CommentRef, NotificationActor, NotificationResponse

logger = get_logger(__name__)


@dataclass
class NotificationPage:
    items: list[Notification] = field(default_factory=list)
    unread_count: int = 0
    next_cursor: UUID | None = None


class NotificationStore(Protocol):
    async def add(
        self,
        *,
        recipient_id: UUID,
        actor_id: UUID,
        notification_type: str,
        article_id: UUID | None,
        comment_id: UUID | None,
    ) -> None: ...

    async def page(self, user_id: UUID, limit: int, cursor: UUID | None) -> tuple[list[Notification], UUID | None]: ...

    async def unread_count(self, user_id: UUID) -> int: ...

    async def mark_read(self, user_id: UUID, ids: list[UUID] | None) -> int: ...


class OrmNotificationStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, *, recipient_id, actor_id, notification_type, article_id, comment_id) -> None:
        self.db.add(
            Notification(
                user_id=recipient_id,
                actor_id=actor_id,
                type=notification_type,
                article_id=article_id,
                comment_id=comment_id,
                created_at=utcnow(),
            )
        )
        await self.db.flush()

    async def page(self, user_id, limit, cursor):
        q = select(Notification).where(Notification.user_id == user_id)
        if cursor is not None:
            anchor = (
                await self.db.execute(
                    select(Notification.created_at, Notification.id).where(
                        Notification.id == cursor,
                        Notification.user_id == user_id,
                    )
                )
            ).first()
            if anchor is None:
                return [], None
            q = q.where(
                or_(
                    Notification.created_at < anchor.created_at,
                    and_(Notification.created_at == anchor.created_at, Notification.id < anchor.id),
                )
            )
        q = (
            q.order_by(desc(Notification.created_at), desc(Notification.id))
            .limit(limit + 1)
            .options(
                selectinload(Notification.actor),
                selectinload(Notification.article),
                selectinload(Notification.comment).selectinload(Comment.article),
            )
        )
        rows = list((await self.db.execute(q)).scalars().all())
        if len(rows) > limit:
            rows = rows[:limit]
            return rows, rows[-1].id
        return rows, None

    async def unread_count(self, user_id):
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.read_at.is_(None),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, user_id, ids):
        stmt = update(Notification).where(
            Notification.user_id == user_id,
            Notification.read_at.is_(None),
        )
        if ids:
            stmt = stmt.where(Notification.id.in_(ids))
        result = await self.db.execute(
            stmt.values(read_at=utcnow()).execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class DisabledNotificationStore:
    """Stand-in used while the notifications table is not provisioned."""

    async def add(self, **kwargs) -> None:
        return None

    async def page(self, user_id, limit, cursor):
        return [], None

    async def unread_count(self, user_id):
        return 0

    async def mark_read(self, user_id, ids):
        return 0


async def resolve_notification_store(db: AsyncSession) -> NotificationStore:
    if await SchemaProbe(db).has_table(Notification.__tablename__):
        return OrmNotificationStore(db)
    logger.warning("notifications_unavailable")
    return DisabledNotificationStore()


async def create_notification(
    db: AsyncSession | None,
    *,
    recipient_id: UUID | None,
    actor_id: UUID,
    notification_type: str,
    article_id: UUID | None = None,
    comment_id: UUID | None = None,
) -> None:
    """Record one notification. Skips empty recipients and self-notifications.

    Pass the caller's session to make the insert part of its transaction;
    with ``db=None`` the notification is committed on its own.
    """
    if not recipient_id or recipient_id == actor_id:
        return
    if db is None:
        async with async_session_maker() as session, atomic(session):
            await _add(session, recipient_id, actor_id, notification_type, article_id, comment_id)
        return
    await _add(db, recipient_id, actor_id, notification_type, article_id, comment_id)


async def _add(db, recipient_id, actor_id, notification_type, article_id, comment_id) -> None:
    store = await resolve_notification_store(db)
    await store.add(
        recipient_id=recipient_id,
        actor_id=actor_id,
        notification_type=notification_type,
        article_id=article_id,
        comment_id=comment_id,
    )
    logger.debug(
        "notification_created",
        recipient_id=str(recipient_id),
        actor_id=str(actor_id),
        type=notification_type,
    )


def clamp_page_size(limit: int | None) -> int:
    if limit is None:
        return settings.NOTIFICATIONS_PAGE_DEFAULT
    return min(max(limit, 1), settings.NOTIFICATIONS_PAGE_MAX)


async def list_notifications(
    db: AsyncSession,
    user_id: UUID,
    *,
    limit: int | None = None,
    cursor: UUID | None = None,
) -> NotificationPage:
    """Newest-first page of the user's inbox plus the total unread count."""
    store = await resolve_notification_store(db)
    items, next_cursor = await store.page(user_id, clamp_page_size(limit), cursor)
    unread = await store.unread_count(user_id)
    return NotificationPage(items=items, unread_count=unread, next_cursor=next_cursor)


async def get_unread_count(db: AsyncSession, user_id: UUID) -> int:
    store = await resolve_notification_store(db)
    return await store.unread_count(user_id)


async def mark_read(db: AsyncSession, user_id: UUID, ids: list[UUID] | None = None) -> int:
    """Stamp ``read_at`` on the user's unread notifications (all, or just ``ids``)."""
    store = await resolve_notification_store(db)
    return await store.mark_read(user_id, [i for i in ids or [] if i] or None)


def notification_to_response(notification: Notification) -> NotificationResponse:
    actor = notification.actor
    comment = notification.comment
    article = notification.article or (comment.article if comment is not None else None)
    return NotificationResponse(
        id=notification.id,
        type=notification.type,
        article_id=notification.article_id,
        comment_id=notification.comment_id,
        created_at=notification.created_at,
        read_at=notification.read_at,
        actor=NotificationActor(id=actor.id, name=actor.name, avatar_url=actor.avatar_url) if actor else None,
        article=ArticleRef(id=article.id, slug=article.slug, title=article.title) if article else None,
        comment=CommentRef(id=comment.id, content=comment.content) if comment else None,
    )
