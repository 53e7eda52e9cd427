"""
Domain errors raised by services and rendered by the handlers in main.py as
``{"success": false, "error": ..., "details": ...}``.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class AuthenticationError(AppError):
    """Missing or invalid credential (JWT, API key, password, PIN)."""
    status_code = 401


class AuthorizationError(AppError):
    """Authenticated, but the row or action belongs to someone else."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ValidationError(AppError):
    """Bad amount, missing field or an invalid status transition."""
    status_code = 400


class ConflictError(AppError):
    status_code = 409


class PaymentProviderError(AppError):
    status_code = 502
