"""
Authentication endpoints for login, registration and logout.

Session-cookie authentication:
- POST /login: step-driven password / email-code login and code requests
- POST /register: complete registration after the email code is verified
- POST /logout: drop the server session and clear the cookie
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_session_id
from app.core.errors import envelope
from app.core.session_cookie import clear_session_cookie, set_session_cookie
from app.schemas.auth import LoginRequest, RegisterRequest
from app.services import auth_flow
from app.services.auth_flow import AuthOutcome

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


def _respond(outcome: AuthOutcome) -> JSONResponse:
    response = JSONResponse(envelope(True, outcome.message, outcome.data))
    if outcome.session is not None:
        set_session_cookie(response, outcome.session.session_id)
    return response


@router.post("/login")
def login(
    request: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Step-driven login.

    `step` is one of password-login, request-otp, verify-otp,
    verify-register-otp. Successful logins set the session cookie.
    """
    return _respond(auth_flow.login(db, request))


@router.post("/register")
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create the account and log it in.

    Consumes any register-purpose code still stored for the email.
    """
    return _respond(auth_flow.complete_registration(db, request))


@router.post("/logout")
def logout(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Log out. Always succeeds, even without a cookie or with a stale one.
    """
    outcome = auth_flow.logout(db, get_session_id(request))
    response = JSONResponse(envelope(True, outcome.message))
    clear_session_cookie(response)
    return response
