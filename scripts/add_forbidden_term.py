import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.exceptions import EngagementError
from app.db.session import async_session_maker, atomic
from app.services.forbidden_terms import create_forbidden_term


async def add_terms(phrases: list[str]):
    async with async_session_maker() as session:
        for phrase in phrases:
            try:
                async with atomic(session):
                    term = await create_forbidden_term(session, phrase)
            except EngagementError as e:
                print(f"Skipped '{phrase}': {e.message}")
                continue
            print(f"Added '{term.phrase}' (matches as '{term.normalized_phrase}')")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/add_forbidden_term.py <phrase> [<phrase> ...]")
        sys.exit(1)

    asyncio.run(add_terms(sys.argv[1:]))
