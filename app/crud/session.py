"""
CRUD operations for UserSession model.

Sessions expire lazily: a session past its expires_at is treated as absent
by every read, and the periodic sweep removes the row later.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.core.security import generate_session_token
from app.crud.base import degrade_on_error, persist
from app.models.session import UserSession


def create(
    db: Session,
    user_id: str,
    email: str,
    now: Optional[datetime] = None,
    commit: bool = True
) -> UserSession:
    """
    Open a new session for a user. Existing sessions stay valid.

    Args:
        db: Database session
        user_id: Owner of the session
        email: Owner's email at login time
        now: Creation time (defaults to the current UTC time)
        commit: False to only flush inside a caller-owned transaction

    Returns:
        UserSession with a fresh random session_id, expiring after SESSION_EXPIRE_DAYS
    """
    now = now or utcnow()
    db_session = UserSession(
        session_id=generate_session_token(),
        user_id=user_id,
        email=email,
        created_at=now,
        expires_at=now + timedelta(days=settings.SESSION_EXPIRE_DAYS),
    )
    db.add(db_session)
    persist(db, commit)
    db.refresh(db_session)
    return db_session


@degrade_on_error()
def get_valid(db: Session, session_id: str, now: Optional[datetime] = None) -> Optional[UserSession]:
    now = now or utcnow()
    return db.query(UserSession).filter(
        UserSession.session_id == session_id,
        UserSession.expires_at > now
    ).first()


def delete(db: Session, session_id: str) -> None:
    """Remove a session. Deleting an unknown id is a no-op."""
    db.query(UserSession).filter(
        UserSession.session_id == session_id
    ).delete(synchronize_session=False)
    db.commit()


def delete_expired(db: Session, now: datetime) -> int:
    deleted = db.query(UserSession).filter(UserSession.expires_at <= now).delete(synchronize_session=False)
    db.commit()
    return deleted
