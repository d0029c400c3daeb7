"""Comment model. Replies are one level deep: a reply's parent has no parent."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow


class CommentStatus:
    PUBLISHED = "PUBLISHED"
    # Reserved for moderation workflows; never written by the engagement core.
    PENDING = "PENDING"
    ARCHIVED = "ARCHIVED"


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=CommentStatus.PUBLISHED)
    ip_address = Column(String(255), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    article = relationship("Article")
