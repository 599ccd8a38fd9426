"""
User model for authentication and profile data.

Email and username are each unique; the constraints live in the schema so
concurrent registrations cannot both succeed.
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.database import Base


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Registered account.

    `password` is nullable: OTP-only accounts never set one. Once set, no
    flow clears it.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)

    # Identity (case-sensitive as stored)
    email = Column(String(320), unique=True, nullable=False, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)

    # bcrypt hash, never plaintext
    password = Column(String(255), nullable=True)

    # Profile
    avatar = Column(String(1024), nullable=False, default="")

    # Account status
    is_verified = Column(Boolean, default=False, nullable=False)

    # Timestamps (naive UTC)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_login_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', username='{self.username}')>"
