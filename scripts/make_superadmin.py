import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app.db.session import async_session_maker
from app.models.user import User


async def promote_user(identifier: str):
    """Grant forbidden-term administration to a user, found by email or username."""
    async with async_session_maker() as session:
        if "@" in identifier:
            stmt = select(User).where(User.email == identifier)
        else:
            stmt = select(User).where(User.username == identifier)

        user = (await session.execute(stmt)).scalar_one_or_none()
        if not user:
            print(f"Error: User '{identifier}' not found.")
            return

        user.is_superadmin = True
        await session.commit()
        print(f"Success: User '{user.username}' ({user.email}) can now manage forbidden terms.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_superadmin.py <email_or_username>")
        sys.exit(1)

    asyncio.run(promote_user(sys.argv[1]))
