"""
Typed exceptions raised by the service layer.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with, so callers catch by type and never parse messages.

    AppError
    +-- ValidationError       (400)
    +-- AuthorizationError    (403)
    +-- NotFoundError         (404)
    +-- ConflictError         (409)
    +-- ConfigurationError    (500)
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for all domain errors."""

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            payload["errors"] = self.details
        return payload


class ValidationError(AppError):
    """Malformed or out-of-range input. Raised before any mutation."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthorizationError(AppError):
    """Actor role is insufficient for the requested operation."""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(AppError):
    """Referenced record does not exist or is not visible to the actor."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(AppError):
    """Uniqueness conflict (e.g. duplicate e-mail)."""

    code = "CONFLICT"
    status_code = 409


class ConfigurationError(AppError):
    """
    Catalog reference data is missing (no categories or units at all).

    This is a deployment-integrity failure, not a user error.
    """

    code = "CONFIGURATION_ERROR"
    status_code = 500
