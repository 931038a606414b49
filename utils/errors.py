"""
Error taxonomy shared by handlers and dependencies.

The repository and token service never raise these for missing data or
bad tokens; they return ``None`` / ``False`` and the HTTP layer decides
which of the errors below applies.
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or the request is malformed."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Missing, invalid or expired token, or bad login credentials."""

    status_code = 401


class AuthorizationError(ServiceError):
    """Valid identity, but not the owner of the target resource."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404
