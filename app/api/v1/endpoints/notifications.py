"""Notifications API."""
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.notification import MarkReadRequest, NotificationListResponse, UnreadCountResponse
from app.services.notification_service import (
    get_unread_count,
    list_notifications,
    mark_read,
    notification_to_response,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_user_notifications(
    limit: int | None = Query(None),
    cursor: UUID | None = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    page = await list_notifications(db, current_user.id, limit=limit, cursor=cursor)
    return NotificationListResponse(
        data=[notification_to_response(n) for n in page.items],
        unread_count=page.unread_count,
        next_cursor=page.next_cursor,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCountResponse(count=await get_unread_count(db, current_user.id))


@router.patch("/read")
async def mark_notifications_read(
    data: MarkReadRequest | None = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await mark_read(db, current_user.id, data.ids if data else None)
    return {"updated": updated}
