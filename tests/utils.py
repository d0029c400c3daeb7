"""Helpers for simulating a database that lags behind the ORM models."""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

# comments as they were before replies were added
LEGACY_COMMENTS_DDL = """
CREATE TABLE comments (
    id CHAR(32) NOT NULL PRIMARY KEY,
    article_id CHAR(32) NOT NULL,
    user_id CHAR(32) NOT NULL,
    content TEXT NOT NULL,
    status VARCHAR(20) NOT NULL,
    ip_address VARCHAR(255),
    user_agent VARCHAR(500),
    created_at DATETIME,
    updated_at DATETIME
)
"""


async def drop_table(db: AsyncSession, table_name: str) -> None:
    await db.execute(text(f"DROP TABLE {table_name}"))
    await db.commit()


async def use_legacy_comments_table(db: AsyncSession) -> None:
    """Swap in a comments table without ``parent_id``."""
    await db.execute(text("DROP TABLE comments"))
    await db.execute(text(LEGACY_COMMENTS_DDL))
    await db.commit()


async def use_comments_table_without_timestamps(db: AsyncSession) -> None:
    """Swap in a comments table that cannot be ordered or displayed."""
    await db.execute(text("DROP TABLE comments"))
    await db.execute(
        text(
            "CREATE TABLE comments (id CHAR(32) NOT NULL PRIMARY KEY, article_id CHAR(32) NOT NULL, "
            "user_id CHAR(32) NOT NULL, content TEXT NOT NULL, status VARCHAR(20) NOT NULL)"
        )
    )
    await db.commit()
