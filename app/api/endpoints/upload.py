"""
Avatar upload for the registration form.

No session is required: the account does not exist yet when the form
uploads its avatar. The returned URL is then sent to POST /auth/register.
"""

from typing import Optional
from fastapi import APIRouter, File, UploadFile

from app.core.config import settings
from app.core.errors import BadRequestError, envelope
from app.services.profile_service import store_avatar

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post("/avatar")
def upload_avatar(file: Optional[UploadFile] = File(None)):
    if file is None or not file.filename:
        raise BadRequestError("No file uploaded")

    url = store_avatar(
        file,
        settings.AVATAR_UPLOAD_ALLOWED_TYPES,
        settings.AVATAR_UPLOAD_MAX_BYTES,
    )
    if url is None:
        raise BadRequestError("No file uploaded")

    return envelope(True, "Avatar uploaded", {"url": url})
