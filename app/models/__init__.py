from app.models.user import User
from app.models.article import Article, ArticleStatus
from app.models.comment import Comment, CommentStatus
from app.models.engagement import ArticleLike, CommentLike
from app.models.notification import Notification, NotificationType
from app.models.moderation import ForbiddenTerm
from app.models.audit import AuditLog, SiteSetting

__all__ = [
    "User",
    "Article",
    "ArticleStatus",
    "Comment",
    "CommentStatus",
    "ArticleLike",
    "CommentLike",
    "Notification",
    "NotificationType",
    "ForbiddenTerm",
    "AuditLog",
    "SiteSetting",
]
