"""Article comments and likes."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_client_ip, get_current_user, get_current_user_optional, get_db, get_user_agent
from app.models.user import User
from app.schemas.comment import CommentResponse, CommentSubmit, LikeSummaryResponse, LikeToggleResponse
from app.services.comment_service import create_comment, get_comments
from app.services.like_service import get_article_like_summary, toggle_article_like

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("/{article_id}/comments", response_model=list[CommentResponse])
async def list_article_comments(
    article_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await get_comments(db, article_id, viewer_id=current_user.id if current_user else None)


@router.post("/{article_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_article_comment(
    article_id: UUID,
    data: CommentSubmit,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_comment(
        db,
        article_id=article_id,
        user_id=current_user.id,
        content=data.content,
        parent_id=data.parent_id,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )


@router.post("/{article_id}/like", response_model=LikeToggleResponse)
async def like_article(
    article_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_article_like(db, article_id, current_user.id)
    return LikeToggleResponse(liked=result.liked, like_count=result.count)


@router.get("/{article_id}/likes", response_model=LikeSummaryResponse)
async def article_like_summary(
    article_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    summary = await get_article_like_summary(db, article_id, viewer_id=current_user.id if current_user else None)
    return LikeSummaryResponse(like_count=summary.count, viewer_has_liked=summary.liked)
