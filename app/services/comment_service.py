"""Comment submission and thread retrieval.

A submission moves through validate -> rate limit -> sanitize -> moderate
-> target checks -> persist -> notify. Any step can stop it with an
``EngagementError``; nothing is written before every check has passed.
"""
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    CommentsDisabledError,
    EmptyCommentError,
    ForbiddenTermError,
    InvalidParentError,
    RateLimitedError,
    TargetUnavailableError,
    ValidationError,
)
from app.core.logging import get_logger
from app.db.session import atomic
from app.models.article import Article, ArticleStatus
from app.models.comment import CommentStatus
from app.schemas.comment import CommentAuthor, CommentCreate, CommentResponse
from app.services.audit_service import record_audit_event
from app.services.comment_store import CommentRecord, NewComment, resolve_comment_store
from app.services.fanout import CommentEvent, plan_comment_notifications
from app.services.forbidden_terms import detect_forbidden_phrase
from app.services.notification_service import create_notification
from app.services.rate_limit import RateLimiter, get_rate_limiter
from app.services.sanitize import sanitize_comment_content, sanitize_metadata
from app.services.site_config import comments_enabled

logger = get_logger(__name__)


def parse_comment_input(content: str, parent_id: UUID | str | None) -> CommentCreate:
    try:
        return CommentCreate.model_validate({"content": content, "parent_id": parent_id})
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else None
        raise ValidationError(error["msg"], field=field) from e


async def enforce_comment_rate_limits(
    rate_limiter: RateLimiter,
    user_id: UUID,
    article_id: UUID,
    ip_address: str | None,
) -> None:
    checks = [
        (f"comment:user:{user_id}", settings.COMMENT_USER_LIMIT, settings.COMMENT_USER_WINDOW_SECONDS),
        (
            f"comment:user-article:{user_id}:{article_id}",
            settings.COMMENT_USER_ARTICLE_LIMIT,
            settings.COMMENT_USER_ARTICLE_WINDOW_SECONDS,
        ),
    ]
    if ip_address:
        checks.append((f"comment:ip:{ip_address}", settings.COMMENT_IP_LIMIT, settings.COMMENT_IP_WINDOW_SECONDS))
    for key, limit, window in checks:
        if await rate_limiter.is_limited(key, limit, window):
            raise RateLimitedError()


def record_to_response(record: CommentRecord) -> CommentResponse:
    return CommentResponse(
        id=record.id,
        article_id=record.article_id,
        user_id=record.user_id,
        parent_id=record.parent_id,
        content=record.content,
        status=record.status,
        created_at=record.created_at,
        updated_at=record.updated_at,
        user=CommentAuthor(id=record.user_id, name=record.author_name, avatar_url=record.author_avatar_url),
        like_count=record.like_count,
        viewer_has_liked=record.viewer_has_liked,
    )


async def create_comment(
    db: AsyncSession,
    *,
    article_id: UUID,
    user_id: UUID,
    content: str,
    parent_id: UUID | str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    rate_limiter: RateLimiter | None = None,
) -> CommentResponse:
    data = parse_comment_input(content, parent_id)
    client_ip = sanitize_metadata(ip_address, settings.IP_ADDRESS_MAX_LENGTH)
    await enforce_comment_rate_limits(rate_limiter or get_rate_limiter(), user_id, article_id, client_ip)

    sanitized = sanitize_comment_content(data.content)
    match = await detect_forbidden_phrase(db, sanitized)
    if match:
        logger.info("comment_rejected_forbidden_term", user_id=str(user_id), article_id=str(article_id))
        raise ForbiddenTermError(match.phrase)
    if not sanitized.strip():
        raise EmptyCommentError()

    article = (
        await db.execute(select(Article.id, Article.status, Article.author_id).where(Article.id == article_id))
    ).first()
    if article is None or article.status != ArticleStatus.PUBLISHED:
        raise TargetUnavailableError("This article does not accept comments.")

    store = await resolve_comment_store(db)
    if store is None:
        raise TargetUnavailableError("This article does not accept comments.")

    parent = None
    if data.parent_id is not None:
        if not store.supports_replies:
            raise InvalidParentError()
        parent = await store.get(data.parent_id)
        if (
            parent is None
            or parent.article_id != article_id
            or parent.parent_id is not None
            or parent.status != CommentStatus.PUBLISHED
        ):
            raise InvalidParentError()

    if not await comments_enabled(db):
        raise CommentsDisabledError()

    async with atomic(db):
        record = await store.insert(
            NewComment(
                article_id=article_id,
                user_id=user_id,
                content=sanitized,
                parent_id=parent.id if parent else None,
                ip_address=client_ip,
                user_agent=sanitize_metadata(user_agent, settings.USER_AGENT_MAX_LENGTH),
            )
        )
    logger.info("comment_created", comment_id=str(record.id), article_id=str(article_id), path=store.path)
    record_audit_event(
        "comment.create",
        "Comment",
        record.id,
        {
            "article_id": str(article_id),
            "parent_id": str(parent.id) if parent else None,
            "path": store.path,
        },
        user_id=user_id,
    )

    planned = plan_comment_notifications(
        CommentEvent(
            actor_id=user_id,
            article_author_id=article.author_id,
            has_parent=parent is not None,
            parent_author_id=parent.user_id if parent else None,
        )
    )
    if planned:
        async with atomic(db):
            for notification in planned:
                await create_notification(
                    db,
                    recipient_id=notification.recipient_id,
                    actor_id=user_id,
                    notification_type=notification.type,
                    article_id=article_id,
                    comment_id=record.id,
                )

    return record_to_response(record)


def build_comment_tree(records: list[CommentRecord]) -> list[CommentResponse]:
    """Nest replies under their parents; roots and replies sorted oldest first."""
    nodes = {record.id: record_to_response(record) for record in records}
    roots: list[CommentResponse] = []
    for record in records:
        node = nodes[record.id]
        parent = nodes.get(record.parent_id) if record.parent_id and record.parent_id != record.id else None
        if parent is not None:
            parent.replies.append(node)
        else:
            roots.append(node)

    def sort_level(level: list[CommentResponse]) -> None:
        level.sort(key=lambda node: node.created_at)
        for node in level:
            sort_level(node.replies)

    sort_level(roots)
    return roots


async def get_comments(db: AsyncSession, article_id: UUID, viewer_id: UUID | None = None) -> list[CommentResponse]:
    store = await resolve_comment_store(db)
    if store is None:
        return []
    records = await store.list_published(article_id, viewer_id)
    return build_comment_tree(records)
