"""Audit log entries and site-wide settings."""
import uuid

from sqlalchemy import JSON, Column, DateTime, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from app.db.session import Base, utcnow

JSONType = JSON().with_variant(JSONB(), "postgresql")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    action = Column(String(100), nullable=False)
    entity = Column(String(100), nullable=False)
    entity_id = Column(String(100), nullable=False)
    user_id = Column(Uuid, nullable=True, index=True)
    details = Column("metadata", JSONType, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class SiteSetting(Base):
    """Key/value site configuration, e.g. ``comments.enabled`` -> true."""
    __tablename__ = "site_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSONType, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
