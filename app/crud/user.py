"""
CRUD operations for User model.

Lookups are exact and case-sensitive. Uniqueness of email and username is
enforced by the schema; a violation surfaces as UserConflictError.
"""

import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import UserConflictError
from app.crud.base import degrade_on_error, persist
from app.models.user import User
from app.schemas.user import UserCreate, UserPatch

logger = logging.getLogger(__name__)


@degrade_on_error()
def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


@degrade_on_error()
def get_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


@degrade_on_error()
def get_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


@degrade_on_error(default=False)
def is_username_taken(db: Session, username: str, exclude_user_id: Optional[str] = None) -> bool:
    """True if any user other than `exclude_user_id` has this username."""
    query = db.query(User.id).filter(User.username == username)
    if exclude_user_id:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def _conflict_field(db: Session, user_data: UserCreate) -> str:
    if get_by_email(db, user_data.email):
        return "email"
    return "username"


def create(db: Session, user_data: UserCreate, commit: bool = True) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        user_data: Fields for the new record (password already hashed)
        commit: False to only flush inside a caller-owned transaction

    Returns:
        Created User with id and created_at assigned

    Raises:
        UserConflictError: email or username already exists
    """
    now = utcnow()
    db_user = User(
        email=user_data.email,
        username=user_data.username,
        password=user_data.password,
        avatar=user_data.avatar,
        is_verified=user_data.is_verified,
        created_at=now,
        last_login_at=user_data.last_login_at or now,
    )
    db.add(db_user)

    try:
        persist(db, commit)
    except IntegrityError:
        db.rollback()
        field = _conflict_field(db, user_data)
        logger.info(f"User creation rejected, {field} already in use")
        raise UserConflictError(field)

    db.refresh(db_user)
    return db_user


def update(db: Session, user_id: str, patch: UserPatch, commit: bool = True) -> Optional[User]:
    """
    Apply a typed partial update to one user.

    Returns the updated user, or None if no user has this id.

    Raises:
        UserConflictError: the new username is already taken
    """
    db_user = get_by_id(db, user_id)
    if db_user is None:
        return None

    for field, value in patch.model_dump(exclude_none=True).items():
        setattr(db_user, field, value)

    try:
        persist(db, commit)
    except IntegrityError:
        db.rollback()
        raise UserConflictError("username")

    db.refresh(db_user)
    return db_user
