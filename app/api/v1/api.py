"""V1 API router aggregation."""
from fastapi import APIRouter

from app.api.v1.endpoints import articles, comments, moderation, notifications

api_router = APIRouter(prefix="/v1")
api_router.include_router(articles.router)
api_router.include_router(comments.router)
api_router.include_router(notifications.router)
api_router.include_router(moderation.router)
