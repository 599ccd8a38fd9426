"""
FastAPI dependencies for session authentication.

The session id travels in the `session` cookie. Every lookup goes back to
the store; nothing about a session is cached between requests.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import UnauthorizedError
from app.crud import session as session_crud
from app.crud import user as user_crud
from app.models.session import UserSession
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Result of resolving a request's session cookie."""
    session: Optional[UserSession] = None
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.user is not None


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def get_session_from_request(request: Request, db: Session) -> SessionContext:
    """
    Resolve the session cookie to a live session and its owner.

    Returns:
        SessionContext(None, None) when the cookie is absent, unknown or expired;
        SessionContext(session, None) when the owning user record is missing;
        otherwise both populated.
    """
    session_id = get_session_id(request)
    if not session_id:
        return SessionContext()

    session = session_crud.get_valid(db, session_id)
    if session is None:
        return SessionContext()

    user = user_crud.get_by_id(db, session.user_id)
    if user is None:
        logger.warning(f"Session for missing user {session.user_id}")
    return SessionContext(session=session, user=user)


def get_session_context(
    request: Request,
    db: Session = Depends(get_db)
) -> SessionContext:
    return get_session_from_request(request, db)


def get_current_user(
    context: SessionContext = Depends(get_session_context)
) -> User:
    """
    Require a valid session whose user still exists.

    Raises:
        UnauthorizedError (401): cookie missing, session expired or unknown, or user gone
    """
    if not context.is_authenticated:
        raise UnauthorizedError()
    return context.user
