"""
Pydantic schemas for user records: store inputs and public views.

Public views serialize with camelCase keys (createdAt, lastLoginAt,
isVerified) to match the existing web client.
"""

from pydantic import BaseModel, field_serializer
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from app.core.clock import isoformat


class UserCreate(BaseModel):
    """Fields the store needs to create a user; id and created_at are assigned."""
    email: str
    username: str
    password: Optional[str] = None  # already hashed
    avatar: str = ""
    is_verified: bool = False
    last_login_at: Optional[datetime] = None


class UserPatch(BaseModel):
    """
    Partial update limited to the mutable user fields.

    id, email and created_at are deliberately absent. None means "leave
    unchanged", so a password can be set but never cleared.
    """
    username: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = None  # already hashed
    last_login_at: Optional[datetime] = None


class _PublicModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class UserSummary(_PublicModel):
    """Profile card visible to anyone (lookup by username)."""
    id: str
    username: str
    avatar: str


class UserPublic(_PublicModel):
    """User payload returned on login."""
    id: str
    email: str
    username: str
    avatar: str


class UserProfile(UserPublic):
    """Current user's own profile (GET /user/me)."""
    created_at: datetime
    last_login_at: Optional[datetime] = None

    @field_serializer("created_at", "last_login_at")
    def _serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return isoformat(value) if value else None


class UserDetail(UserProfile):
    """User payload returned after registration."""
    is_verified: bool


def dump_user(schema: type, user) -> dict:
    """Serialize an ORM user through one of the public views."""
    return schema.model_validate(user).model_dump(by_alias=True)
