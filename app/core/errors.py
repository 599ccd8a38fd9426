"""
Error types and the uniform response envelope.

Every response body, success or failure, has the shape
``{"success": bool, "message": str, "data": ...?}``.
"""

from typing import Any, Optional
from fastapi import status


class APIError(Exception):
    """Caller-facing failure carrying an HTTP status and a short message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class BadRequestError(APIError):
    def __init__(self, message: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, message)


class UnauthorizedError(APIError):
    def __init__(self, message: str = "Not logged in"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message)


class NotFoundError(APIError):
    def __init__(self, message: str):
        super().__init__(status.HTTP_404_NOT_FOUND, message)


class UpstreamError(APIError):
    """External service (mail, storage) failed; reported as 500."""

    def __init__(self, message: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class UserConflictError(Exception):
    """Raised by the store when an email or username is already taken."""

    def __init__(self, field: str):
        super().__init__(f"{field} already in use")
        self.field = field


def envelope(success: bool, message: str, data: Optional[Any] = None) -> dict:
    """Build the response body shared by every endpoint."""
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    return body
