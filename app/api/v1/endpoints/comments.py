"""Comment likes."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.comment import LikeToggleResponse
from app.services.like_service import toggle_comment_like

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
async def like_comment(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_comment_like(db, comment_id, current_user.id)
    return LikeToggleResponse(liked=result.liked, like_count=result.count)
