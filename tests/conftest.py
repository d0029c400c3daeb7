"""Shared fixtures: an in-memory SQLite database built from the ORM metadata."""
from collections.abc import AsyncIterator
from datetime import datetime
from unittest.mock import Mock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models.article import Article, ArticleStatus
from app.models.comment import Comment, CommentStatus
from app.models.user import User


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_maker) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture(autouse=True)
def audit_task(monkeypatch) -> Mock:
    """Replace the Celery audit task so no broker is contacted."""
    task = Mock()
    monkeypatch.setattr("app.services.audit_service.write_audit_log", task)
    return task


@pytest.fixture
def make_user(db: AsyncSession):
    async def _make_user(username: str | None = None, **kwargs) -> User:
        username = username or f"user_{uuid4().hex[:8]}"
        user = User(username=username, email=f"{username}@example.com", **kwargs)
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_article(db: AsyncSession):
    async def _make_article(author: User | None = None, status: str = ArticleStatus.PUBLISHED, **kwargs) -> Article:
        slug = kwargs.pop("slug", f"article-{uuid4().hex[:8]}")
        article = Article(
            slug=slug,
            title=kwargs.pop("title", slug.replace("-", " ").title()),
            status=status,
            author_id=author.id if author else None,
            **kwargs,
        )
        db.add(article)
        await db.commit()
        return article

    return _make_article


@pytest.fixture
def make_comment(db: AsyncSession):
    async def _make_comment(
        article: Article,
        user: User,
        content: str = "A comment",
        parent: Comment | None = None,
        status: str = CommentStatus.PUBLISHED,
        created_at: datetime | None = None,
    ) -> Comment:
        comment = Comment(
            article_id=article.id,
            user_id=user.id,
            parent_id=parent.id if parent else None,
            content=content,
            status=status,
            created_at=created_at or datetime(2026, 1, 1),
        )
        db.add(comment)
        await db.commit()
        return comment

    return _make_comment
