"""Celery application for fire-and-forget background tasks (audit log)."""
from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "inkwell",
    broker=settings.CELERY_BROKER_URL,
    include=["app.workers.audit"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_ignore_result=True,
)
