from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class SessionExpiredError(AuthenticationError):
    """Raised when a presented session cookie no longer resolves to a live session.

    The client must drop its cookie, so the response also clears it.
    """

    def __init__(self, message: str = "Invalid or expired session") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class BillingNotConfiguredError(ValidationError):
    """Raised when a billing operation is requested but Stripe is not configured."""

    def __init__(self, message: str = "Stripe not configured") -> None:
        super().__init__(message)


class StorageError(Exception):
    """Raised when the persistence backend is unavailable or fails."""


class ExternalServiceError(Exception):
    """Raised when a third-party provider (Google, Stripe) returns an error."""
