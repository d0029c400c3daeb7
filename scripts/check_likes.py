import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import desc, func, select

from app.db.session import async_session_maker
from app.models.article import Article
from app.models.engagement import ArticleLike, CommentLike
from app.models.user import User


async def check_likes():
    async with async_session_maker() as db:
        article_likes = await db.scalar(select(func.count()).select_from(ArticleLike))
        comment_likes = await db.scalar(select(func.count()).select_from(CommentLike))
        print(f"Article likes: {article_likes}")
        print(f"Comment likes: {comment_likes}")

        # Most recent article likes with who and what
        result = await db.execute(
            select(User.username, Article.title)
            .select_from(ArticleLike)
            .join(User, ArticleLike.user_id == User.id)
            .join(Article, ArticleLike.article_id == Article.id)
            .order_by(desc(ArticleLike.created_at))
            .limit(10)
        )
        rows = result.all()

        if rows:
            print("\nRecent article likes:")
            for username, title in rows:
                preview = (title[:30] + "...") if len(title) > 30 else title
                print(f"  - {username} liked: {preview}")
        else:
            print("\nNo article likes found in database!")


if __name__ == "__main__":
    asyncio.run(check_likes())
