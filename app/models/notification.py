"""Notification model for comments, replies and likes (pull-based inbox)."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow


class NotificationType:
    ARTICLE_COMMENT = "ARTICLE_COMMENT"
    COMMENT_REPLY = "COMMENT_REPLY"
    ARTICLE_LIKE = "ARTICLE_LIKE"
    COMMENT_LIKE = "COMMENT_LIKE"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)  # recipient
    actor_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    article_id = Column(Uuid, ForeignKey("articles.id", ondelete="CASCADE"), nullable=True)
    comment_id = Column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    read_at = Column(DateTime, nullable=True)

    actor = relationship("User", foreign_keys=[actor_id])
    article = relationship("Article", foreign_keys=[article_id])
    comment = relationship("Comment", foreign_keys=[comment_id])
