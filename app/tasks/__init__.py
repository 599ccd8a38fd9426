"""
Celery tasks package.

- maintenance_tasks: periodic cleanup of expired OTP codes and sessions
"""

from app.tasks import maintenance_tasks

__all__ = ["maintenance_tasks"]
