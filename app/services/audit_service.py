"""Fire-and-forget audit logging."""
from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.workers.audit import write_audit_log

logger = get_logger(__name__)


def record_audit_event(
    action: str,
    entity: str,
    entity_id: str | UUID,
    metadata: dict[str, Any] | None = None,
    user_id: UUID | None = None,
) -> None:
    """Queue an audit entry. Never raises: a lost entry must not fail the action it describes."""
    try:
        write_audit_log.delay(action, entity, str(entity_id), metadata, str(user_id) if user_id else None)
    except Exception:
        logger.warning("audit_log_dispatch_failed", action=action, entity=entity, entity_id=str(entity_id), exc_info=True)
