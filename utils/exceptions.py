"""
Application exceptions.

Every APIError subclass carries the HTTP status and error code used by the
global error handlers in api.errors to build the JSON error envelope.
"""
from __future__ import annotations


class APIError(Exception):
    status = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message()
        self.details = details
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return "An unexpected error occurred"


class ValidationError(APIError):
    """Missing or malformed input."""
    status = 400
    code = "VALIDATION_ERROR"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid input"


class AuthenticationError(APIError):
    """Bad credentials or no bearer token at all."""
    status = 401
    code = "UNAUTHORIZED"

    @classmethod
    def default_message(cls) -> str:
        return "Authentication required"


class AuthorizationError(APIError):
    """A token was presented but is not good enough: invalid, expired, reused or not the owner."""
    status = 403
    code = "FORBIDDEN"

    @classmethod
    def default_message(cls) -> str:
        return "Forbidden"


class NotFoundError(APIError):
    status = 404
    code = "NOT_FOUND"

    @classmethod
    def default_message(cls) -> str:
        return "Resource not found"


class ConfigurationError(APIError):
    """Server misconfiguration, e.g. a missing signing secret. Always fatal for the request."""
    status = 500
    code = "CONFIGURATION_ERROR"

    @classmethod
    def default_message(cls) -> str:
        return "Server is not configured correctly"
