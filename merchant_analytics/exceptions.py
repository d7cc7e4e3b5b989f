"""
Application exceptions.

Every error the API reports deliberately is an AnalyticsError. A single
exception handler renders it into the response envelope:

    {"success": false, "error": <error_code>, "message": <message>}

Usage:
    raise InvalidDateRangeError("Start and end dates required for custom period")
    raise PermissionDeniedError()
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base error carrying an envelope code and HTTP status."""

    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {
            "success": False,
            "error": self.error_code,
            "message": self.message,
        }


class InvalidDateRangeError(AnalyticsError):
    """Custom report range is missing, unparsable or reversed (400)."""

    error_code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid date range"


class AuthenticationError(AnalyticsError):
    """Bearer token missing, malformed or expired (401)."""

    error_code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required"


class PermissionDeniedError(AnalyticsError):
    """Authenticated, but the role may not use this endpoint (403)."""

    error_code = "FORBIDDEN"
    status_code = 403
    default_message = "You do not have permission to access this resource"
