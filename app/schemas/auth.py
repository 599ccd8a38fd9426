"""
Pydantic schemas for login, registration and profile lookup requests.

Request fields are all optional at the schema level: the auth flow checks
presence itself so each missing field gets its own 400 message.
"""

from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    """Body of POST /auth/login; `step` selects the transition."""
    email: Optional[str] = None
    step: Optional[str] = None
    otp: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Body of POST /auth/register (registration completion)."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    avatar: Optional[str] = None


class ProfileLookupRequest(BaseModel):
    """Body of POST /user/profile."""
    username: Optional[str] = None

