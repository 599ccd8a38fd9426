"""
One-time code model for email login and registration.

At most one code exists per (email, purpose); issuing a new code replaces
the previous one.
"""

import enum
from sqlalchemy import Column, String, DateTime, Integer, Index, UniqueConstraint
from app.core.clock import utcnow
from app.core.database import Base


class OTPPurpose(str, enum.Enum):
    """Scope tag partitioning codes so one flow cannot replay another's code."""
    LOGIN = "login"
    REGISTER = "register"


class OTPCode(Base):
    """
    6-digit email code.

    Validity: exact code match, matching purpose, and expires_at strictly in
    the future. Email is not a foreign key: register codes reference
    addresses that have no user yet.
    """
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False)
    code = Column(String(6), nullable=False)
    purpose = Column(String(16), nullable=False)

    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('email', 'purpose', name='uq_otp_codes_email_purpose'),
        Index('ix_otp_codes_expires_at', 'expires_at'),
    )

    def __repr__(self):
        return f"<OTPCode(email={self.email}, purpose={self.purpose}, expires_at={self.expires_at})>"
