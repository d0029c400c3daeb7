"""Forbidden phrases used to reject comment text."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow


class ForbiddenTerm(Base):
    __tablename__ = "forbidden_terms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    phrase = Column(String(200), nullable=False)
    normalized_phrase = Column(String(200), nullable=False, unique=True)
    created_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    created_by = relationship("User")
