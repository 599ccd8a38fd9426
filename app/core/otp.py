"""
One-time code issuance.

Codes are 6 ASCII digits drawn uniformly from 100000-999999 with the
secrets module, so the leading digit is never zero. The generator itself is
pure; expiry is computed separately and handed to the store.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.crud import otp_code as otp_crud
from app.models.otp_code import OTPCode, OTPPurpose

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_SPAN = 900000


def generate_otp_code() -> str:
    """
    Generate a 6-digit one-time code.

    Returns:
        str: numeric code in [100000, 999999]
    """
    return str(CODE_MIN + secrets.randbelow(CODE_SPAN))


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    """Absolute expiry for a code issued at `now`."""
    return (now or utcnow()) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)


def issue_otp_code(db: Session, email: str, purpose: OTPPurpose) -> OTPCode:
    """
    Generate and store a fresh code for (email, purpose).

    Any earlier code for the same key stops validating.
    """
    record = otp_crud.save(
        db,
        email=email,
        code=generate_otp_code(),
        purpose=purpose,
        expires_at=otp_expiry(),
    )
    logger.info(f"Issued {record.purpose} OTP for {email} (expires {record.expires_at.isoformat()})")
    return record
