"""Schema probing for rolling migrations.

Application code can be deployed ahead of the Alembic revision that adds
a table or column. Services ask the probe what the live schema offers and
pick a data-access path up front instead of reacting to query failures.
"""
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.logging import get_logger

logger = get_logger(__name__)


def _live_columns(sync_session: Session, table_name: str) -> frozenset[str] | None:
    inspector = inspect(sync_session.connection())
    if not inspector.has_table(table_name):
        return None
    return frozenset(column["name"] for column in inspector.get_columns(table_name))


class SchemaProbe:
    """Reports which tables and columns exist in the connected database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def columns(self, table_name: str) -> frozenset[str] | None:
        """Live column names of ``table_name``, or None when the table is missing."""
        columns = await self.db.run_sync(_live_columns, table_name)
        if columns is None:
            logger.info("schema_object_missing", table=table_name)
        return columns

    async def has_table(self, table_name: str) -> bool:
        return await self.columns(table_name) is not None
