"""
CRUD operations (Create, Read, Update, Delete) for the credential store.

This layer provides a clean separation between API routes and database operations,
following the Repository pattern.
"""

from app.crud import user, otp_code, session, maintenance

__all__ = ["user", "otp_code", "session", "maintenance"]
