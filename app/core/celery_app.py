"""Celery application for background tasks (counter reconciliation)."""
from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "bookcircle",
    broker=settings.CELERY_BROKER_URL,
    include=["app.workers.reconcile"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "reconcile-social-counters": {
            "task": "app.workers.reconcile.reconcile_counters_task",
            "schedule": settings.RECONCILE_INTERVAL_MINUTES * 60.0,
        },
    },
)
