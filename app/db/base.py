"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.article import Article  # noqa: F401
from app.models.comment import Comment  # noqa: F401
from app.models.engagement import ArticleLike, CommentLike  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.moderation import ForbiddenTerm  # noqa: F401
from app.models.audit import AuditLog, SiteSetting  # noqa: F401

__all__ = [
    "Base",
    "User",
    "Article",
    "Comment",
    "ArticleLike",
    "CommentLike",
    "Notification",
    "ForbiddenTerm",
    "AuditLog",
    "SiteSetting",
]
