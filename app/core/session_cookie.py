"""
Session cookie emission.

Login and registration set the cookie; logout overwrites it with an empty
value and max-age 0 so the browser drops it immediately. Both use the same
attributes so the clearing cookie replaces the original.
"""

from fastapi import Response
from app.core.config import settings


def _cookie_attributes() -> dict:
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        **_cookie_attributes(),
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        **_cookie_attributes(),
    )
