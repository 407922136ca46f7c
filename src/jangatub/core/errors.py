"""Application error taxonomy.

Each error carries the HTTP status it is rendered with by
``core.error_handlers.app_error_handler``.
"""

import builtins
from typing import Optional


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class AuthenticationError(AppError):
    code = "unauthenticated"
    status_code = 401


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class ServiceUnavailableError(AppError):
    """An optional integration is not configured."""
    code = "service_unavailable"
    status_code = 503


class UpstreamServiceError(AppError):
    """A configured external service failed; the caller may retry."""
    code = "upstream_error"
    status_code = 500
