"""
Login and registration flow.

The client drives the flow with a `step` tag; the server keeps no
per-client step state and re-derives what is legal from the store on every
request:

- password-login:      email + password -> session
- request-otp:         email -> code mailed (purpose "login" if the user
                       exists, else "register")
- verify-otp:          email + login code -> session (code consumed)
- verify-register-otp: email + register code -> ok (code kept alive)
- complete_registration (POST /auth/register): profile -> user + session
                       (register code consumed)

Each handler checks every precondition before its first write and raises
APIError on failure; the API layer renders the envelope and sets cookies.
A step that writes more than one row runs inside one transaction, so it
lands whole or not at all.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import BadRequestError, UpstreamError, UserConflictError
from app.core.otp import issue_otp_code
from app.core.security import get_password_hash, verify_password
from app.core.validators import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    validate_email,
    validate_password,
)
from app.crud import otp_code as otp_crud
from app.crud import session as session_crud
from app.crud import user as user_crud
from app.crud.base import atomic
from app.models.otp_code import OTPPurpose
from app.models.session import UserSession
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest
from app.schemas.user import UserCreate, UserDetail, UserPatch, UserPublic, dump_user
from app.services.email_service import email_service

logger = logging.getLogger(__name__)

STEP_PASSWORD_LOGIN = "password-login"
STEP_REQUEST_OTP = "request-otp"
STEP_VERIFY_OTP = "verify-otp"
STEP_VERIFY_REGISTER_OTP = "verify-register-otp"


@dataclass
class AuthOutcome:
    """Successful transition: message, optional payload, and a new session if one was opened."""
    message: str
    data: Optional[Dict[str, Any]] = None
    session: Optional[UserSession] = None


def _require_otp(request: LoginRequest) -> str:
    if not request.otp:
        raise BadRequestError("Please enter the verification code")
    return request.otp


def _start_session(db: Session, user: User) -> AuthOutcome:
    """
    Stamp last_login_at and open a session for an authenticated user.

    Only flushes; the caller commits inside `atomic`.
    """
    updated = user_crud.update(db, user.id, UserPatch(last_login_at=utcnow()), commit=False)
    if updated is None:
        raise UpstreamError("Failed to update user information")

    session = session_crud.create(db, updated.id, updated.email, commit=False)
    logger.info(f"User logged in: {updated.email}")
    return AuthOutcome(
        message="Login successful",
        data={"user": dump_user(UserPublic, updated)},
        session=session,
    )


def password_login(db: Session, request: LoginRequest) -> AuthOutcome:
    if not request.password:
        raise BadRequestError("Please enter your password")

    user = user_crud.get_by_email(db, request.email)
    if user is None:
        raise BadRequestError("User does not exist")

    if not user.password:
        raise BadRequestError("This account has no password, please sign in with a verification code")

    if not verify_password(request.password, user.password):
        logger.info(f"Password login failed for {request.email}")
        raise BadRequestError("Incorrect password")

    with atomic(db):
        return _start_session(db, user)


def request_otp(db: Session, request: LoginRequest) -> AuthOutcome:
    email = request.email
    existing_user = user_crud.get_by_email(db, email)
    purpose = OTPPurpose.LOGIN if existing_user else OTPPurpose.REGISTER

    record = issue_otp_code(db, email, purpose)

    if not email_service.send_otp_code(email, record.code, purpose.value):
        logger.error(f"Failed to send {purpose.value} OTP to {email}")
        raise UpstreamError("Failed to send verification code, please try again later")

    return AuthOutcome(
        message=f"Verification code sent to {email}",
        data={"isNewUser": existing_user is None, "purpose": purpose.value},
    )


def verify_otp(db: Session, request: LoginRequest) -> AuthOutcome:
    """Login with an emailed code. Existing users only; the code is consumed."""
    otp = _require_otp(request)

    user = user_crud.get_by_email(db, request.email)
    if user is None:
        raise BadRequestError("User does not exist, please complete registration first")

    with atomic(db):
        # Code is consumed before any session row is written
        if not otp_crud.consume(db, request.email, otp, OTPPurpose.LOGIN, commit=False):
            raise BadRequestError("Verification code is invalid or expired")
        return _start_session(db, user)


def verify_register_otp(db: Session, request: LoginRequest) -> AuthOutcome:
    """
    Confirm a registration code without consuming it.

    The code stays redeemable until complete_registration deletes it, so a
    client that drops between this step and the profile form can resume
    without a new email.
    """
    otp = _require_otp(request)

    if user_crud.get_by_email(db, request.email) is not None:
        raise BadRequestError("This email is already registered, please sign in")

    if otp_crud.get_valid(db, request.email, otp, OTPPurpose.REGISTER) is None:
        raise BadRequestError("Verification code is invalid or expired")

    return AuthOutcome(message="Verification code accepted")


STEP_HANDLERS: Dict[str, Callable[[Session, LoginRequest], AuthOutcome]] = {
    STEP_PASSWORD_LOGIN: password_login,
    STEP_REQUEST_OTP: request_otp,
    STEP_VERIFY_OTP: verify_otp,
    STEP_VERIFY_REGISTER_OTP: verify_register_otp,
}


def login(db: Session, request: LoginRequest) -> AuthOutcome:
    """Dispatch a POST /auth/login body to its step handler."""
    if not validate_email(request.email):
        raise BadRequestError("Invalid email format")

    handler = STEP_HANDLERS.get(request.step or "")
    if handler is None:
        raise BadRequestError("Invalid request step")

    return handler(db, request)


def complete_registration(db: Session, request: RegisterRequest) -> AuthOutcome:
    """
    Create the account, open a session, and consume the register code.

    Raises:
        BadRequestError: missing/invalid field, or email/username already taken
    """
    email, username, password, avatar = request.email, request.username, request.password, request.avatar

    if not (email and username and password and avatar):
        raise BadRequestError("Please fill in all required fields")

    if not validate_email(email):
        raise BadRequestError("Invalid email format")

    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise BadRequestError(f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters")

    if not validate_password(password):
        raise BadRequestError("Password must be at least 6 characters")

    if user_crud.get_by_email(db, email) is not None:
        raise BadRequestError("This email is already registered")

    if user_crud.get_by_username(db, username) is not None:
        raise BadRequestError("Username is already taken")

    try:
        with atomic(db):
            user = user_crud.create(db, UserCreate(
                email=email,
                username=username,
                password=get_password_hash(password),
                avatar=avatar,
                is_verified=True,
                last_login_at=utcnow(),
            ), commit=False)
            session = session_crud.create(db, user.id, user.email, commit=False)
            otp_crud.delete(db, user.email, OTPPurpose.REGISTER, commit=False)
    except UserConflictError as e:
        # Lost a race with a concurrent registration
        if e.field == "email":
            raise BadRequestError("This email is already registered")
        raise BadRequestError("Username is already taken")

    logger.info(f"New user registered: {user.email} (id: {user.id})")
    return AuthOutcome(
        message="Registration successful",
        data={"user": dump_user(UserDetail, user)},
        session=session,
    )


def logout(db: Session, session_id: Optional[str]) -> AuthOutcome:
    """Delete the server-side session if there is one. Always succeeds."""
    if session_id:
        session_crud.delete(db, session_id)
        logger.info("Session logged out")
    return AuthOutcome(message="Logged out successfully")
