"""Site-wide switches stored in ``site_settings``, with env fallbacks."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.probe import SchemaProbe
from app.models.audit import SiteSetting

COMMENTS_ENABLED_KEY = "comments.enabled"


async def comments_enabled(db: AsyncSession) -> bool:
    if not await SchemaProbe(db).has_table(SiteSetting.__tablename__):
        return settings.COMMENTS_ENABLED
    result = await db.execute(select(SiteSetting.value).where(SiteSetting.key == COMMENTS_ENABLED_KEY))
    row = result.first()
    if row is None or row.value is None:
        return settings.COMMENTS_ENABLED
    if isinstance(row.value, str):
        return row.value.strip().lower() in ("true", "1", "yes", "on")
    return bool(row.value)
