"""
CRUD operations for OTPCode model.

One row per (email, purpose). Saving a code for an existing key overwrites
it in place, so the previous code stops validating immediately.
"""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.crud.base import degrade_on_error, persist
from app.models.otp_code import OTPCode, OTPPurpose

logger = logging.getLogger(__name__)


def _purpose_value(purpose) -> str:
    return purpose.value if isinstance(purpose, OTPPurpose) else str(purpose)


def save(db: Session, email: str, code: str, purpose: OTPPurpose, expires_at: datetime) -> OTPCode:
    """
    Store a code, superseding any existing code for (email, purpose).

    Concurrent saves for the same key resolve as last write wins: an insert
    that loses the race to the unique constraint retries as an update.
    """
    purpose = _purpose_value(purpose)

    for _ in range(2):
        existing = db.query(OTPCode).filter(
            OTPCode.email == email,
            OTPCode.purpose == purpose
        ).first()

        if existing:
            existing.code = code
            existing.expires_at = expires_at
            existing.created_at = utcnow()
            db_code = existing
        else:
            db_code = OTPCode(email=email, code=code, purpose=purpose, expires_at=expires_at)
            db.add(db_code)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Concurrent OTP save for {email} ({purpose}), retrying as update")
            continue

        db.refresh(db_code)
        return db_code

    raise RuntimeError(f"Could not store OTP code for {email} ({purpose})")


@degrade_on_error()
def get_valid(
    db: Session,
    email: str,
    code: str,
    purpose: OTPPurpose,
    now: Optional[datetime] = None
) -> Optional[OTPCode]:
    """
    Return the code record only if code, purpose and email all match and it
    has not expired (expires_at strictly after `now`).
    """
    now = now or utcnow()
    return db.query(OTPCode).filter(
        OTPCode.email == email,
        OTPCode.code == code,
        OTPCode.purpose == _purpose_value(purpose),
        OTPCode.expires_at > now
    ).first()


def consume(
    db: Session,
    email: str,
    code: str,
    purpose: OTPPurpose,
    now: Optional[datetime] = None,
    commit: bool = True
) -> bool:
    """
    Redeem a code: delete it only if it matches and is unexpired.

    The check and the delete are one statement, so of two concurrent
    redemptions of the same code exactly one sees a deleted row.

    Returns:
        True if this call consumed the code
    """
    now = now or utcnow()
    deleted = db.query(OTPCode).filter(
        OTPCode.email == email,
        OTPCode.code == code,
        OTPCode.purpose == _purpose_value(purpose),
        OTPCode.expires_at > now
    ).delete(synchronize_session=False)
    persist(db, commit)
    return deleted == 1


def delete(db: Session, email: str, purpose: OTPPurpose, commit: bool = True) -> None:
    """Remove every code for (email, purpose). Deleting a missing key is a no-op."""
    db.query(OTPCode).filter(
        OTPCode.email == email,
        OTPCode.purpose == _purpose_value(purpose)
    ).delete(synchronize_session=False)
    persist(db, commit)


def delete_expired(db: Session, now: datetime) -> int:
    deleted = db.query(OTPCode).filter(OTPCode.expires_at <= now).delete(synchronize_session=False)
    db.commit()
    return deleted
