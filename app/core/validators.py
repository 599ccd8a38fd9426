"""
Stateless input validation and username helpers.

The email check is deliberately permissive: one '@', then a dot somewhere
after it, no whitespace.
"""

import re
import secrets
import time
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud import user as user_crud

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# CJK unified ideographs U+4E00-U+9FA5, ASCII letters, digits, underscore
USERNAME_RE = re.compile(r"^[\u4e00-\u9fa5a-zA-Z0-9_]{2,20}$")

USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 20

# Suffix attempts before falling back to a random username
MAX_USERNAME_ATTEMPTS = 999

GENERATED_PREFIX = "user_"

# Anything USERNAME_RE would reject
DISALLOWED_USERNAME_CHARS = re.compile(r"[^\u4e00-\u9fa5a-zA-Z0-9_]")


def validate_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.fullmatch(email) is not None


def validate_username(username: Optional[str]) -> bool:
    return bool(username) and USERNAME_RE.fullmatch(username) is not None


def validate_password(password: Optional[str]) -> bool:
    return bool(password) and len(password) >= settings.PASSWORD_MIN_LENGTH


def is_username_exists(db: Session, username: str, exclude_user_id: Optional[str] = None) -> bool:
    """True if a user other than `exclude_user_id` already has `username`."""
    return user_crud.is_username_taken(db, username, exclude_user_id)


def _timestamp_suffix() -> str:
    return str(int(time.time() * 1000))[-4:]


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while value:
        value, rem = divmod(value, 36)
        out = digits[rem] + out
    return out or "0"


def _local_part(email: str) -> str:
    return DISALLOWED_USERNAME_CHARS.sub("", email.split("@")[0])


def _compose_username(local_part: str, suffix: str) -> str:
    """Prefix + local part + suffix, trimming the local part to fit USERNAME_MAX_LENGTH."""
    room = max(USERNAME_MAX_LENGTH - len(GENERATED_PREFIX) - len(suffix), 0)
    return f"{GENERATED_PREFIX}{local_part[:room]}{suffix}"


def generate_default_username(email: str) -> str:
    """
    Placeholder username from the email's local part plus a short timestamp.

    Characters the username rule rejects are dropped and the local part is
    trimmed, so the result always passes validate_username.
    """
    return _compose_username(_local_part(email), f"_{_timestamp_suffix()}")


def generate_unique_username(db: Session, email: str) -> str:
    """
    Derive a username from `email` that no user currently has.

    Retries with numeric suffixes; after MAX_USERNAME_ATTEMPTS collisions it
    returns a random username instead of looping further.
    """
    username = generate_default_username(email)
    local_part = _local_part(email)
    counter = 1

    while is_username_exists(db, username):
        if counter > MAX_USERNAME_ATTEMPTS:
            return _compose_username(_base36(int(time.time() * 1000)), f"_{secrets.token_hex(3)}")
        username = _compose_username(local_part, f"_{_timestamp_suffix()}_{counter}")
        counter += 1

    return username
