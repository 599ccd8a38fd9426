"""
Celery tasks for credential store maintenance.
"""

import logging
from celery import shared_task
from app.core.database import SessionLocal
from app.crud.maintenance import cleanup_expired_data

logger = logging.getLogger(__name__)


@shared_task(name="cleanup_expired_data_task")
def cleanup_expired_data_task():
    """
    Remove expired OTP codes and sessions.

    Scheduled hourly by Celery beat. Safe to overlap with request handling
    and with other runs of itself: it only deletes rows already past expiry.
    """
    db = SessionLocal()
    try:
        cleanup_expired_data(db)
    finally:
        db.close()
    return {"status": "success"}
