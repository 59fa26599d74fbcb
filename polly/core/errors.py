"""Error taxonomy for the guard layer.

Every public service operation catches these and converts them into the
``{"error": ...}`` result shape; nothing here is meant to escape to the client
as a stack trace.
"""
from typing import Optional


class PollyError(Exception):
    """Base class for errors that carry a user-facing message."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(PollyError):
    """No resolvable identity where one is required."""

    default_message = "You must be logged in."


class AuthorizationError(PollyError):
    """Identity resolved but lacks ownership or role."""

    default_message = "You are not allowed to do that."


class ValidationError(PollyError):
    """Malformed, oversized or unsafe input."""

    default_message = "Invalid input."


class SecurityTokenError(PollyError):
    """Missing, invalid or expired CSRF token."""

    default_message = "Invalid security token. Please refresh the page and try again."


class NotFoundError(PollyError):
    default_message = "Not found"


class StoreError(PollyError):
    """Failure reported by the row store or identity provider."""

    default_message = "Storage error."


class ConflictError(StoreError):
    """A write violated a uniqueness constraint."""

    default_message = "Duplicate record."


class RedirectRequired(Exception):
    """Page-level guard failure: send the caller somewhere else.

    Not a PollyError; result boundaries re-raise it.
    """

    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        super().__init__(f"redirect to {location}")
