"""
Profile lookup and self-service updates.

Avatar bytes go to the configured storage backend; only the resulting URL
is written to the user record.
"""

import logging
from io import BytesIO
from typing import List, Optional
from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import BadRequestError, NotFoundError, UpstreamError, UserConflictError
from app.core.storage import StorageError, build_avatar_filename, storage
from app.core.validators import is_username_exists, validate_username
from app.crud import user as user_crud
from app.models.user import User
from app.schemas.user import UserPatch, UserPublic, UserSummary, dump_user

logger = logging.getLogger(__name__)


def _has_content(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def store_avatar(
    upload: UploadFile,
    allowed_types: List[str],
    max_bytes: int,
    owner: str = "avatar"
) -> Optional[str]:
    """
    Validate and persist an uploaded image.

    Returns:
        The public URL, or None if the upload is empty.

    Raises:
        BadRequestError: unsupported content type or file too large
        UpstreamError: the storage backend failed
    """
    too_large = BadRequestError(f"Avatar must not exceed {max_bytes // (1024 * 1024)}MB")

    if upload.size is not None and upload.size > max_bytes:
        raise too_large

    # One byte past the limit is enough to tell an oversized upload apart
    data = upload.file.read(max_bytes + 1)
    if not data:
        return None

    if upload.content_type not in allowed_types:
        raise BadRequestError("Unsupported image format")

    if len(data) > max_bytes:
        raise too_large

    filename = build_avatar_filename(upload.filename, owner)
    try:
        return storage.upload_file(BytesIO(data), filename, upload.content_type)
    except StorageError:
        raise UpstreamError("Avatar upload failed")


def lookup_profile(db: Session, username: Optional[str]) -> dict:
    if not username:
        raise BadRequestError("Username must not be empty")

    user = user_crud.get_by_username(db, username)
    if user is None:
        raise NotFoundError("User does not exist")

    return {"user": dump_user(UserSummary, user)}


def update_profile(
    db: Session,
    user: User,
    username: Optional[str] = None,
    avatar: Optional[UploadFile] = None
) -> dict:
    """
    Change the current user's username and/or avatar.

    Raises:
        BadRequestError: invalid or taken username, bad image, or nothing to change
    """
    patch = UserPatch()

    if username and username != user.username:
        if not validate_username(username):
            raise BadRequestError(
                "Invalid username (2-20 characters: CJK, letters, digits, underscore)"
            )
        if is_username_exists(db, username, exclude_user_id=user.id):
            raise BadRequestError("Username already exists")
        patch.username = username

    if _has_content(avatar):
        patch.avatar = store_avatar(
            avatar,
            settings.AVATAR_ALLOWED_TYPES,
            settings.AVATAR_MAX_BYTES,
            owner=user.id,
        )

    if not patch.model_dump(exclude_none=True):
        raise BadRequestError("Nothing to update")

    try:
        updated = user_crud.update(db, user.id, patch)
    except UserConflictError:
        raise BadRequestError("Username already exists")

    if updated is None:
        raise UpstreamError("Update failed")

    logger.info(f"Profile updated for user {user.id}: {sorted(patch.model_dump(exclude_none=True))}")
    return {"user": dump_user(UserPublic, updated)}
