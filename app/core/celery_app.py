"""
Celery application configuration.

Redis is both broker and result backend. Celery beat drives the periodic
sweep of expired OTP codes and sessions; the API process itself runs no
background loop.
"""

from celery import Celery
from app.core.config import settings

# Create Celery instance
celery_app = Celery(
    "covidvis_auth_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

# Configure Celery
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,

    # Result backend
    result_expires=3600,

    worker_prefetch_multiplier=1,

    # Periodic jobs
    beat_schedule={
        "cleanup-expired-auth-data": {
            "task": "cleanup_expired_data_task",
            "schedule": float(settings.CLEANUP_INTERVAL_SECONDS),
        },
    },
)

# Auto-discover tasks from app.tasks module
celery_app.autodiscover_tasks(['app'])
