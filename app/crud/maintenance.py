"""
Expired-credential sweep.

Only rows already past expires_at are removed, so the sweep never affects a
live session or code and may run concurrently with request handling.
"""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.crud import otp_code as otp_crud
from app.crud import session as session_crud

logger = logging.getLogger(__name__)


def cleanup_expired_data(db: Session, now: Optional[datetime] = None) -> None:
    """Drop all expired OTP codes and sessions. Errors are logged, not raised."""
    now = now or utcnow()
    try:
        codes = otp_crud.delete_expired(db, now)
        sessions = session_crud.delete_expired(db, now)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Expired data cleanup failed: {e}")
        return

    logger.info(f"Expired data cleanup removed {codes} OTP codes and {sessions} sessions")
