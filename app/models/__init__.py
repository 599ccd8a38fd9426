"""
Database models package.
"""

from app.models.user import User
from app.models.otp_code import OTPCode, OTPPurpose
from app.models.session import UserSession

__all__ = ["User", "OTPCode", "OTPPurpose", "UserSession"]
