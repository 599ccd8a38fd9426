"""
User profile endpoints.

- GET /me: current user's profile (session required)
- POST /profile: public profile card by username
- PUT /profile: change own username and/or avatar (multipart form)
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.errors import envelope
from app.models.user import User
from app.schemas.auth import ProfileLookupRequest
from app.schemas.user import UserProfile, dump_user
from app.services import profile_service

router = APIRouter(prefix="/user", tags=["Users"])


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """Return the logged-in user's profile, or 401."""
    return envelope(True, "User loaded", {"user": dump_user(UserProfile, current_user)})


@router.post("/profile")
def get_profile(
    request: ProfileLookupRequest,
    db: Session = Depends(get_db)
):
    return envelope(True, "User loaded", profile_service.lookup_profile(db, request.username))


@router.put("/profile")
def update_profile(
    username: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    data = profile_service.update_profile(db, current_user, username=username, avatar=avatar)
    return envelope(True, "Profile updated", data)
