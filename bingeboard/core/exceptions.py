"""
Application exceptions.

Each exception carries the HTTP status it maps to, so routes and crud
helpers can raise them and the handler in ``bingeboard.main`` renders a
``{"success": false, "message": ...}`` body.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception class for application-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class AuthenticationError(AppException):
    """Raised when the caller is not logged in."""

    def __init__(self, message: str = "Not logged in"):
        super().__init__(message, status_code=401)


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ConflictError(AppException):
    """Raised when a unique field (username, email) is already taken."""

    def __init__(self, message: str = "Conflict with current state"):
        super().__init__(message, status_code=409)


class ExternalServiceError(AppException):
    """Raised when the show metadata service call fails."""

    def __init__(self, service: str, message: str = "External service error"):
        self.service = service
        super().__init__(f"{service}: {message}", status_code=502)
