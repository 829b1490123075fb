from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised when an operation collides with existing state (duplicates, open sessions)."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer or refresh token cannot be verified."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class EmailNotVerifiedError(DomainError):
    """Raised on login with correct credentials but an unverified email.

    Kept apart from AuthenticationError so clients can offer to resend the code.
    """

    code = "EMAIL_NOT_VERIFIED"

    def __init__(self, message: str = "EMAIL_NOT_VERIFIED", *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details)
