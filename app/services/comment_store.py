"""Data access for comments, chosen by what the live schema provides.

``OrmCommentStore`` is used when every mapped ``comments`` column exists.
While a migration is still rolling out, ``RawCommentStore`` issues
parametrized SQL against just the columns that are there. Like data is
joined in only when ``comment_likes`` exists; otherwise every comment
reports zero likes.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import Integer, String, bindparam, case, column, func, literal_column, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db.probe import SchemaProbe
from app.db.session import utcnow
from app.models.comment import Comment, CommentStatus
from app.models.engagement import CommentLike
from app.models.user import User

logger = get_logger(__name__)

ANONYMOUS_NAME = "Visitor"

COMMENT_COLUMNS = Comment.__table__.c

# Without these a comment can be neither stored nor shown.
REQUIRED_COMMENT_COLUMNS = frozenset({"id", "article_id", "user_id", "content", "created_at"})


@dataclass
class CommentRecord:
    id: UUID
    article_id: UUID
    user_id: UUID
    content: str
    status: str
    created_at: datetime
    parent_id: UUID | None = None
    updated_at: datetime | None = None
    author_name: str = ANONYMOUS_NAME
    author_avatar_url: str | None = None
    like_count: int = 0
    viewer_has_liked: bool = False


@dataclass
class NewComment:
    article_id: UUID
    user_id: UUID
    content: str
    parent_id: UUID | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class CommentStore(Protocol):
    path: str
    supports_replies: bool

    async def get(self, comment_id: UUID) -> CommentRecord | None: ...

    async def insert(self, comment: NewComment) -> CommentRecord: ...

    async def list_published(self, article_id: UUID, viewer_id: UUID | None) -> list[CommentRecord]: ...


def _author_name(username: str | None, display_name: str | None) -> str:
    return display_name or username or ANONYMOUS_NAME


class OrmCommentStore:
    path = "orm"
    supports_replies = True

    def __init__(self, db: AsyncSession, likes_available: bool):
        self.db = db
        self.likes_available = likes_available

    async def get(self, comment_id):
        comment = await self.db.get(Comment, comment_id)
        if comment is None:
            return None
        return CommentRecord(
            id=comment.id,
            article_id=comment.article_id,
            user_id=comment.user_id,
            parent_id=comment.parent_id,
            content=comment.content,
            status=comment.status,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    async def insert(self, new):
        now = utcnow()
        comment = Comment(
            article_id=new.article_id,
            user_id=new.user_id,
            parent_id=new.parent_id,
            content=new.content,
            status=CommentStatus.PUBLISHED,
            ip_address=new.ip_address,
            user_agent=new.user_agent,
            created_at=now,
            updated_at=now,
        )
        self.db.add(comment)
        await self.db.flush()
        return CommentRecord(
            id=comment.id,
            article_id=comment.article_id,
            user_id=comment.user_id,
            parent_id=comment.parent_id,
            content=comment.content,
            status=comment.status,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    async def list_published(self, article_id, viewer_id):
        columns = [Comment, User.username, User.display_name, User.avatar_url]
        q = (
            select(*columns)
            .outerjoin(User, User.id == Comment.user_id)
            .where(Comment.article_id == article_id, Comment.status == CommentStatus.PUBLISHED)
            .order_by(Comment.created_at)
        )
        if self.likes_available:
            viewer_flag = (
                func.max(case((CommentLike.user_id == viewer_id, 1), else_=0))
                if viewer_id is not None
                else literal_column("0")
            )
            q = (
                q.add_columns(func.count(CommentLike.user_id).label("like_count"), viewer_flag.label("viewer_liked"))
                .outerjoin(CommentLike, CommentLike.comment_id == Comment.id)
                .group_by(Comment.id, User.id)
            )
        rows = (await self.db.execute(q)).all()

        records = []
        for row in rows:
            comment = row[0]
            records.append(
                CommentRecord(
                    id=comment.id,
                    article_id=comment.article_id,
                    user_id=comment.user_id,
                    parent_id=comment.parent_id,
                    content=comment.content,
                    status=comment.status,
                    created_at=comment.created_at,
                    updated_at=comment.updated_at,
                    author_name=_author_name(row.username, row.display_name),
                    author_avatar_url=row.avatar_url,
                    like_count=row.like_count if self.likes_available else 0,
                    viewer_has_liked=bool(row.viewer_liked) if self.likes_available else False,
                )
            )
        return records


class RawCommentStore:
    """Parametrized SQL restricted to the columns present in the live table."""

    path = "raw"

    def __init__(self, db: AsyncSession, live_columns: frozenset[str], likes_available: bool):
        self.db = db
        self.columns = [name for name in COMMENT_COLUMNS.keys() if name in live_columns]
        self.likes_available = likes_available

    @property
    def supports_replies(self) -> bool:
        return "parent_id" in self.columns

    def _record(self, row, **extra) -> CommentRecord:
        data = row._mapping
        return CommentRecord(
            id=data["id"],
            article_id=data["article_id"],
            user_id=data["user_id"],
            parent_id=data.get("parent_id"),
            content=data["content"],
            status=data.get("status") or CommentStatus.PUBLISHED,
            created_at=data["created_at"],
            updated_at=data.get("updated_at"),
            **extra,
        )

    async def get(self, comment_id):
        stmt = (
            text(f"SELECT {', '.join(self.columns)} FROM comments WHERE id = :id")
            .bindparams(bindparam("id", value=comment_id, type_=COMMENT_COLUMNS.id.type))
            .columns(*(column(name, COMMENT_COLUMNS[name].type) for name in self.columns))
        )
        row = (await self.db.execute(stmt)).first()
        return self._record(row) if row is not None else None

    async def insert(self, new):
        now = utcnow()
        values = {
            "id": uuid.uuid4(),
            "article_id": new.article_id,
            "user_id": new.user_id,
            "parent_id": new.parent_id,
            "content": new.content,
            "status": CommentStatus.PUBLISHED,
            "ip_address": new.ip_address,
            "user_agent": new.user_agent,
            "created_at": now,
            "updated_at": now,
        }
        present = [name for name in self.columns if name in values]
        stmt = text(
            f"INSERT INTO comments ({', '.join(present)}) VALUES ({', '.join(':' + name for name in present)})"
        ).bindparams(*(bindparam(name, value=values[name], type_=COMMENT_COLUMNS[name].type) for name in present))
        await self.db.execute(stmt)
        return CommentRecord(
            id=values["id"],
            article_id=new.article_id,
            user_id=new.user_id,
            parent_id=new.parent_id if self.supports_replies else None,
            content=new.content,
            status=CommentStatus.PUBLISHED,
            created_at=now,
            updated_at=now,
        )

    async def list_published(self, article_id, viewer_id):
        where = ["c.article_id = :article_id"]
        params = [bindparam("article_id", value=article_id, type_=COMMENT_COLUMNS.article_id.type)]
        if "status" in self.columns:
            where.append("c.status = :status")
            params.append(bindparam("status", value=CommentStatus.PUBLISHED, type_=String()))
        stmt = (
            text(
                f"SELECT {', '.join('c.' + name for name in self.columns)}, "
                "u.username AS author_username, u.display_name AS author_display_name, "
                "u.avatar_url AS author_avatar_url "
                "FROM comments c LEFT JOIN users u ON u.id = c.user_id "
                f"WHERE {' AND '.join(where)} ORDER BY c.created_at ASC"
            )
            .bindparams(*params)
            .columns(
                *(column(name, COMMENT_COLUMNS[name].type) for name in self.columns),
                column("author_username", String),
                column("author_display_name", String),
                column("author_avatar_url", String),
            )
        )
        rows = (await self.db.execute(stmt)).all()
        ids = [row._mapping["id"] for row in rows]
        counts, liked = await self._like_data(ids, viewer_id)
        return [
            self._record(
                row,
                author_name=_author_name(row._mapping["author_username"], row._mapping["author_display_name"]),
                author_avatar_url=row._mapping["author_avatar_url"],
                like_count=counts.get(row._mapping["id"], 0),
                viewer_has_liked=row._mapping["id"] in liked,
            )
            for row in rows
        ]

    async def _like_data(self, ids: list[UUID], viewer_id: UUID | None) -> tuple[dict[UUID, int], set[UUID]]:
        if not ids or not self.likes_available:
            return {}, set()
        id_type = COMMENT_COLUMNS.id.type
        count_stmt = (
            text(
                "SELECT comment_id, COUNT(*) AS like_count FROM comment_likes "
                "WHERE comment_id IN :ids GROUP BY comment_id"
            )
            .bindparams(bindparam("ids", value=ids, type_=id_type, expanding=True))
            .columns(column("comment_id", id_type), column("like_count", Integer))
        )
        counts = {row.comment_id: row.like_count for row in (await self.db.execute(count_stmt)).all()}
        liked: set[UUID] = set()
        if viewer_id is not None:
            liked_stmt = (
                text("SELECT comment_id FROM comment_likes WHERE user_id = :viewer_id AND comment_id IN :ids")
                .bindparams(
                    bindparam("viewer_id", value=viewer_id, type_=id_type),
                    bindparam("ids", value=ids, type_=id_type, expanding=True),
                )
                .columns(column("comment_id", id_type))
            )
            liked = {row.comment_id for row in (await self.db.execute(liked_stmt)).all()}
        return counts, liked


async def resolve_comment_store(db: AsyncSession) -> CommentStore | None:
    """Pick the comment data-access path for the live schema; None without a comments table."""
    probe = SchemaProbe(db)
    live = await probe.columns(Comment.__tablename__)
    if live is None:
        return None
    if not REQUIRED_COMMENT_COLUMNS <= live:
        logger.warning("comment_store_unusable", missing_columns=sorted(REQUIRED_COMMENT_COLUMNS - live))
        return None
    likes_available = await probe.has_table(CommentLike.__tablename__)
    missing = set(COMMENT_COLUMNS.keys()) - live
    if not missing:
        return OrmCommentStore(db, likes_available)
    logger.warning("comment_store_raw_fallback", missing_columns=sorted(missing))
    return RawCommentStore(db, live, likes_available)
