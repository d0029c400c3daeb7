"""Celery task that persists audit log entries."""
import asyncio
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.celery_app import celery_app
from app.core.config import settings
from app.db.session import atomic, utcnow
from app.models.audit import AuditLog

# Each task runs in its own event loop, so connections must not be pooled across tasks.
worker_engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
worker_session_maker = async_sessionmaker(worker_engine, class_=AsyncSession, expire_on_commit=False)


async def persist_audit_entry(
    session_maker: async_sessionmaker,
    action: str,
    entity: str,
    entity_id: str,
    metadata: dict[str, Any] | None = None,
    user_id: str | None = None,
) -> None:
    async with session_maker() as session, atomic(session):
        session.add(
            AuditLog(
                action=action,
                entity=entity,
                entity_id=entity_id,
                user_id=UUID(user_id) if user_id else None,
                details=metadata,
                created_at=utcnow(),
            )
        )


@celery_app.task
def write_audit_log(
    action: str,
    entity: str,
    entity_id: str,
    metadata: dict[str, Any] | None = None,
    user_id: str | None = None,
) -> None:
    asyncio.run(persist_audit_entry(worker_session_maker, action, entity, entity_id, metadata, user_id))
