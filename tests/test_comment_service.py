"""Tests for comment submission and thread retrieval."""
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.core.exceptions import (
    CommentsDisabledError,
    EmptyCommentError,
    ForbiddenTermError,
    InvalidParentError,
    RateLimitedError,
    TargetUnavailableError,
    ValidationError,
)
from app.models.article import ArticleStatus
from app.models.audit import SiteSetting
from app.models.comment import Comment, CommentStatus
from app.models.notification import Notification, NotificationType
from app.services.comment_service import create_comment, get_comments
from app.services.forbidden_terms import create_forbidden_term
from app.services.like_service import toggle_comment_like
from app.services.rate_limit import RateLimiter
from tests.utils import drop_table, use_comments_table_without_timestamps, use_legacy_comments_table


@pytest.fixture
def no_limits() -> RateLimiter:
    return RateLimiter(None)


async def notifications_for(db, user_id) -> list[str]:
    rows = (await db.execute(select(Notification.type).where(Notification.user_id == user_id))).scalars().all()
    return sorted(rows)


class TestCreateComment:
    @pytest.mark.asyncio
    async def test_creates_published_comment(self, db, make_user, make_article, no_limits):
        author = await make_user()
        commenter = await make_user(display_name="Budi")
        article = await make_article(author)

        result = await create_comment(
            db,
            article_id=article.id,
            user_id=commenter.id,
            content="  Nice <b>piece</b> & thanks  ",
            ip_address="203.0.113.9",
            user_agent="Mozilla/5.0\r\nInjected",
            rate_limiter=no_limits,
        )

        assert result.content == "Nice \u2039b\u203apiece\u2039/b\u203a \uff06 thanks"
        assert result.status == CommentStatus.PUBLISHED
        assert result.parent_id is None
        stored = await db.get(Comment, result.id)
        assert stored.ip_address == "203.0.113.9"
        assert stored.user_agent == "Mozilla/5.0 Injected"

    @pytest.mark.asyncio
    async def test_records_audit_entry(self, db, make_user, make_article, no_limits, audit_task):
        commenter = await make_user()
        article = await make_article(await make_user())

        result = await create_comment(
            db, article_id=article.id, user_id=commenter.id, content="hello", rate_limiter=no_limits
        )

        audit_task.delay.assert_called_once_with(
            "comment.create",
            "Comment",
            str(result.id),
            {"article_id": str(article.id), "parent_id": None, "path": "orm"},
            str(commenter.id),
        )

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_the_comment(self, db, make_user, make_article, no_limits, audit_task):
        audit_task.delay.side_effect = ConnectionError("broker down")
        commenter = await make_user()
        article = await make_article(await make_user())

        result = await create_comment(
            db, article_id=article.id, user_id=commenter.id, content="still here", rate_limiter=no_limits
        )
        assert result.content == "still here"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   \n  "])
    async def test_blank_content_is_a_validation_error(self, db, make_user, make_article, no_limits, content):
        commenter = await make_user()
        article = await make_article(await make_user())

        with pytest.raises(ValidationError) as exc_info:
            await create_comment(db, article_id=article.id, user_id=commenter.id, content=content, rate_limiter=no_limits)
        assert exc_info.value.field == "content"

    @pytest.mark.asyncio
    async def test_too_long(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())

        with pytest.raises(ValidationError):
            await create_comment(
                db, article_id=article.id, user_id=commenter.id, content="x" * 1001, rate_limiter=no_limits
            )

    @pytest.mark.asyncio
    async def test_empty_after_sanitizing(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())

        with pytest.raises(EmptyCommentError):
            await create_comment(
                db, article_id=article.id, user_id=commenter.id, content="\u200b\u200b", rate_limiter=no_limits
            )

    @pytest.mark.asyncio
    async def test_forbidden_phrase_is_rejected(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())
        await create_forbidden_term(db, "kata kasar")
        await db.commit()

        with pytest.raises(ForbiddenTermError) as exc_info:
            await create_comment(
                db,
                article_id=article.id,
                user_id=commenter.id,
                content="ini ada kata-kasar sekali",
                rate_limiter=no_limits,
            )
        assert exc_info.value.phrase == "kata kasar"
        assert (await db.execute(select(Comment))).scalars().all() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ArticleStatus.DRAFT, ArticleStatus.ARCHIVED])
    async def test_unpublished_article(self, db, make_user, make_article, no_limits, status):
        commenter = await make_user()
        article = await make_article(await make_user(), status=status)

        with pytest.raises(TargetUnavailableError):
            await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=no_limits)

    @pytest.mark.asyncio
    async def test_missing_article(self, db, make_user, no_limits):
        commenter = await make_user()
        with pytest.raises(TargetUnavailableError):
            await create_comment(db, article_id=uuid4(), user_id=commenter.id, content="hi", rate_limiter=no_limits)

    @pytest.mark.asyncio
    async def test_comments_disabled_by_site_setting(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())
        db.add(SiteSetting(key="comments.enabled", value=False))
        await db.commit()

        with pytest.raises(CommentsDisabledError):
            await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=no_limits)

    @pytest.mark.asyncio
    async def test_comments_disabled_by_setting_fallback(self, db, make_user, make_article, no_limits, monkeypatch):
        monkeypatch.setattr("app.services.site_config.settings.COMMENTS_ENABLED", False)
        commenter = await make_user()
        article = await make_article(await make_user())

        with pytest.raises(CommentsDisabledError):
            await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=no_limits)


class TestReplies:
    @pytest.mark.asyncio
    async def test_reply_to_top_level_comment(self, db, make_user, make_article, make_comment, no_limits):
        commenter, replier = await make_user(), await make_user()
        article = await make_article(await make_user())
        parent = await make_comment(article, commenter)

        reply = await create_comment(
            db,
            article_id=article.id,
            user_id=replier.id,
            content="agreed",
            parent_id=str(parent.id),
            rate_limiter=no_limits,
        )
        assert reply.parent_id == parent.id

    @pytest.mark.asyncio
    async def test_blank_parent_id_means_top_level(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())

        result = await create_comment(
            db, article_id=article.id, user_id=commenter.id, content="hi", parent_id="  ", rate_limiter=no_limits
        )
        assert result.parent_id is None

    @pytest.mark.asyncio
    async def test_malformed_parent_id(self, db, make_user, make_article, no_limits):
        commenter = await make_user()
        article = await make_article(await make_user())

        with pytest.raises(ValidationError) as exc_info:
            await create_comment(
                db, article_id=article.id, user_id=commenter.id, content="hi", parent_id="nope", rate_limiter=no_limits
            )
        assert exc_info.value.field == "parent_id"

    @pytest.mark.asyncio
    async def test_reply_to_a_reply_is_rejected(self, db, make_user, make_article, make_comment, no_limits):
        user = await make_user()
        article = await make_article(await make_user())
        top = await make_comment(article, user)
        reply = await make_comment(article, user, parent=top)

        with pytest.raises(InvalidParentError):
            await create_comment(
                db, article_id=article.id, user_id=user.id, content="deeper", parent_id=reply.id, rate_limiter=no_limits
            )

    @pytest.mark.asyncio
    async def test_parent_on_another_article(self, db, make_user, make_article, make_comment, no_limits):
        user, author = await make_user(), await make_user()
        article, other = await make_article(author), await make_article(author)
        parent = await make_comment(other, user)

        with pytest.raises(InvalidParentError):
            await create_comment(
                db, article_id=article.id, user_id=user.id, content="hi", parent_id=parent.id, rate_limiter=no_limits
            )

    @pytest.mark.asyncio
    async def test_unpublished_or_missing_parent(self, db, make_user, make_article, make_comment, no_limits):
        user = await make_user()
        article = await make_article(await make_user())
        hidden = await make_comment(article, user, status=CommentStatus.ARCHIVED)

        for parent_id in (hidden.id, uuid4()):
            with pytest.raises(InvalidParentError):
                await create_comment(
                    db, article_id=article.id, user_id=user.id, content="hi", parent_id=parent_id, rate_limiter=no_limits
                )


class TestFanout:
    @pytest.mark.asyncio
    async def test_comment_and_reply_scenario(self, db, make_user, make_article, no_limits):
        a, b, c = await make_user("a"), await make_user("b"), await make_user("c")
        article = await make_article(a)

        top = await create_comment(db, article_id=article.id, user_id=b.id, content="first", rate_limiter=no_limits)
        assert await notifications_for(db, a.id) == [NotificationType.ARTICLE_COMMENT]

        await create_comment(
            db, article_id=article.id, user_id=c.id, content="reply", parent_id=top.id, rate_limiter=no_limits
        )
        assert await notifications_for(db, b.id) == [NotificationType.COMMENT_REPLY]
        assert await notifications_for(db, a.id) == [NotificationType.ARTICLE_COMMENT] * 2
        assert await notifications_for(db, c.id) == []

    @pytest.mark.asyncio
    async def test_reply_to_article_author_notifies_once(self, db, make_user, make_article, no_limits):
        a, c = await make_user("a"), await make_user("c")
        article = await make_article(a)

        top = await create_comment(db, article_id=article.id, user_id=a.id, content="author here", rate_limiter=no_limits)
        assert await notifications_for(db, a.id) == []

        await create_comment(
            db, article_id=article.id, user_id=c.id, content="hello author", parent_id=top.id, rate_limiter=no_limits
        )
        assert await notifications_for(db, a.id) == [NotificationType.COMMENT_REPLY]

    @pytest.mark.asyncio
    async def test_notification_points_at_the_new_comment(self, db, make_user, make_article, no_limits):
        a, b = await make_user(), await make_user()
        article = await make_article(a)

        result = await create_comment(db, article_id=article.id, user_id=b.id, content="hey", rate_limiter=no_limits)

        row = (await db.execute(select(Notification))).scalar_one()
        assert (row.actor_id, row.article_id, row.comment_id) == (b.id, article.id, result.id)

    @pytest.mark.asyncio
    async def test_comment_survives_missing_notifications_table(self, db, make_user, make_article, no_limits):
        a, b = await make_user(), await make_user()
        article = await make_article(a)
        await drop_table(db, "notifications")

        result = await create_comment(db, article_id=article.id, user_id=b.id, content="hey", rate_limiter=no_limits)
        assert result.content == "hey"


class TestRateLimits:
    @pytest.mark.asyncio
    async def test_user_limit(self, db, make_user, make_article):
        commenter = await make_user()
        article = await make_article(await make_user())
        limiter = RateLimiter(None)
        limiter.is_limited = AsyncMock(side_effect=lambda key, limit, window: key.startswith("comment:user:"))

        with pytest.raises(RateLimitedError):
            await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=limiter)

    @pytest.mark.asyncio
    async def test_keys_and_limits(self, db, make_user, make_article):
        commenter = await make_user()
        article = await make_article(await make_user())
        limiter = RateLimiter(None)
        limiter.is_limited = AsyncMock(return_value=False)

        await create_comment(
            db,
            article_id=article.id,
            user_id=commenter.id,
            content="hi",
            ip_address="198.51.100.7",
            rate_limiter=limiter,
        )

        calls = [c.args for c in limiter.is_limited.await_args_list]
        assert calls == [
            (f"comment:user:{commenter.id}", 10, 300),
            (f"comment:user-article:{commenter.id}:{article.id}", 4, 120),
            ("comment:ip:198.51.100.7", 12, 300),
        ]

    @pytest.mark.asyncio
    async def test_no_ip_key_without_ip(self, db, make_user, make_article):
        commenter = await make_user()
        article = await make_article(await make_user())
        limiter = RateLimiter(None)
        limiter.is_limited = AsyncMock(return_value=False)

        await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=limiter)

        keys = [c.args[0] for c in limiter.is_limited.await_args_list]
        assert not any(key.startswith("comment:ip:") for key in keys)

    @pytest.mark.asyncio
    async def test_limited_submission_writes_nothing(self, db, make_user, make_article):
        commenter = await make_user()
        article = await make_article(await make_user())
        limiter = RateLimiter(None)
        limiter.is_limited = AsyncMock(return_value=True)

        with pytest.raises(RateLimitedError):
            await create_comment(db, article_id=article.id, user_id=commenter.id, content="hi", rate_limiter=limiter)
        assert (await db.execute(select(Comment))).scalars().all() == []


class TestGetComments:
    @pytest.mark.asyncio
    async def test_thread_with_likes(self, db, make_user, make_article, no_limits):
        a, b, c = await make_user("a"), await make_user("b", display_name="Bee"), await make_user("c")
        article = await make_article(a)
        top = await create_comment(db, article_id=article.id, user_id=b.id, content="top", rate_limiter=no_limits)
        reply = await create_comment(
            db, article_id=article.id, user_id=c.id, content="reply", parent_id=top.id, rate_limiter=no_limits
        )
        await toggle_comment_like(db, top.id, a.id)
        await toggle_comment_like(db, top.id, c.id)

        thread = await get_comments(db, article.id, viewer_id=c.id)

        assert [node.id for node in thread] == [top.id]
        assert thread[0].user.name == "Bee"
        assert thread[0].like_count == 2
        assert thread[0].viewer_has_liked is True
        assert [r.id for r in thread[0].replies] == [reply.id]
        assert thread[0].replies[0].like_count == 0

    @pytest.mark.asyncio
    async def test_anonymous_viewer(self, db, make_user, make_article, make_comment):
        user = await make_user()
        article = await make_article(await make_user())
        comment = await make_comment(article, user)
        await toggle_comment_like(db, comment.id, user.id)

        thread = await get_comments(db, article.id)
        assert thread[0].like_count == 1
        assert thread[0].viewer_has_liked is False

    @pytest.mark.asyncio
    async def test_hides_unpublished(self, db, make_user, make_article, make_comment):
        user = await make_user()
        article = await make_article(await make_user())
        await make_comment(article, user, status=CommentStatus.PENDING)

        assert await get_comments(db, article.id) == []

    @pytest.mark.asyncio
    async def test_without_comment_likes_table(self, db, make_user, make_article, make_comment):
        user = await make_user()
        article = await make_article(await make_user())
        await make_comment(article, user)
        await drop_table(db, "comment_likes")

        thread = await get_comments(db, article.id, viewer_id=user.id)
        assert thread[0].like_count == 0
        assert thread[0].viewer_has_liked is False

    @pytest.mark.asyncio
    async def test_without_comments_table(self, db, make_user, make_article, no_limits):
        user = await make_user()
        article = await make_article(await make_user())
        await drop_table(db, "comments")

        assert await get_comments(db, article.id) == []
        with pytest.raises(TargetUnavailableError):
            await create_comment(db, article_id=article.id, user_id=user.id, content="hi", rate_limiter=no_limits)


class TestLegacyCommentsTable:
    """A comments table created before replies existed."""

    @pytest.mark.asyncio
    async def test_top_level_comment_uses_raw_path(self, db, make_user, make_article, no_limits, audit_task):
        a, b = await make_user(), await make_user(display_name="Bee")
        article = await make_article(a)
        await use_legacy_comments_table(db)

        result = await create_comment(db, article_id=article.id, user_id=b.id, content="legacy", rate_limiter=no_limits)

        assert result.parent_id is None
        assert audit_task.delay.call_args.args[3]["path"] == "raw"
        thread = await get_comments(db, article.id)
        assert [(n.id, n.content, n.user.name) for n in thread] == [(result.id, "legacy", "Bee")]
        assert await notifications_for(db, a.id) == [NotificationType.ARTICLE_COMMENT]

    @pytest.mark.asyncio
    async def test_replies_are_impossible(self, db, make_user, make_article, no_limits):
        user = await make_user()
        article = await make_article(await make_user())
        await use_legacy_comments_table(db)
        top = await create_comment(db, article_id=article.id, user_id=user.id, content="top", rate_limiter=no_limits)

        with pytest.raises(InvalidParentError):
            await create_comment(
                db, article_id=article.id, user_id=user.id, content="re", parent_id=top.id, rate_limiter=no_limits
            )

    @pytest.mark.asyncio
    async def test_like_counts_on_raw_path(self, db, make_user, make_article, no_limits):
        user, reader = await make_user(), await make_user()
        article = await make_article(await make_user())
        await use_legacy_comments_table(db)
        top = await create_comment(db, article_id=article.id, user_id=user.id, content="top", rate_limiter=no_limits)

        await toggle_comment_like(db, top.id, reader.id)

        thread = await get_comments(db, article.id, viewer_id=reader.id)
        assert (thread[0].like_count, thread[0].viewer_has_liked) == (1, True)

    @pytest.mark.asyncio
    async def test_table_without_timestamps_is_unavailable(self, db, make_user, make_article, no_limits):
        user = await make_user()
        article = await make_article(await make_user())
        await use_comments_table_without_timestamps(db)

        assert await get_comments(db, article.id) == []
        with pytest.raises(TargetUnavailableError):
            await create_comment(db, article_id=article.id, user_id=user.id, content="hi", rate_limiter=no_limits)
