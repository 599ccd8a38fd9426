"""
Security utilities for password hashing and session token generation.

Passwords are hashed using bcrypt (cost factor 12) via passlib.
Session identifiers are opaque bearer tokens drawn from the OS CSPRNG.
"""

import logging
import secrets
from passlib.context import CryptContext
from app.core.config import settings

logger = logging.getLogger(__name__)

# Password hashing context (bcrypt)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# 32 random bytes -> 256-bit session identifiers
SESSION_TOKEN_BYTES = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    # Bcrypt has a 72-byte limit - truncate if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return pwd_context.verify(password_bytes, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Note: Bcrypt has a 72-byte limit. Passwords longer than 72 bytes
    are automatically truncated to comply with this limitation.
    """
    # Bcrypt has a 72-byte limit - truncate if necessary
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)


def generate_session_token() -> str:
    """Return an unguessable URL-safe session identifier."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
