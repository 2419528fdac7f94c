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
    """Raised when credentials or the access token are missing or expired."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a presented token is well-formed but not acceptable."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ConflictError(UserError):
    """Raised when a uniqueness constraint (email, display name) is violated."""


class ExternalServiceError(UserError):
    """Raised when the LLM provider fails or returns an unusable response."""


class InfrastructureError(Exception):
    """Raised when the database is unreachable or an operation times out.

    Not a UserError: the cause is logged, the client gets a generic retry message.
    """
