from app.schemas.comment import (
    CommentAuthor,
    CommentCreate,
    CommentResponse,
    LikeSummaryResponse,
    LikeToggleResponse,
)
from app.schemas.moderation import ForbiddenTermCreate, ForbiddenTermResponse
from app.schemas.notification import (
    MarkReadRequest,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
