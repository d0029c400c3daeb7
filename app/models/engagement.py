"""Like models. A row's existence is the "liked" state; counts are derived."""
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid

from app.db.session import Base, utcnow


class ArticleLike(Base):
    __tablename__ = "article_likes"
    __table_args__ = (UniqueConstraint("article_id", "user_id", name="uq_article_likes_article_user"),)

    article_id = Column(Uuid, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow)


class CommentLike(Base):
    __tablename__ = "comment_likes"
    __table_args__ = (UniqueConstraint("comment_id", "user_id", name="uq_comment_likes_comment_user"),)

    comment_id = Column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow)
