from __future__ import annotations


INTERNAL_ERROR_MESSAGE = "An internal error occurred."


class DomainError(Exception):
    """Base for domain errors."""


class ValidationError(DomainError):
    """Malformed or missing input."""


class ConflictError(DomainError):
    """Email or phone already registered."""


class EmailTakenError(ConflictError):
    """A confirmed user already owns this email."""


class PhoneTakenError(ConflictError):
    """A confirmed user already owns this phone."""


class NotFoundError(DomainError):
    """No matching pending code, credentials or token record."""


class PendingRegistrationNotFoundError(NotFoundError):
    """Confirmation code unknown, already used or expired."""


class UserNotFoundError(NotFoundError):
    """No confirmed user matches."""


class RefreshTokenNotFoundError(NotFoundError):
    """No live refresh token record; the session was revoked or signed out."""


class UnauthorizedError(DomainError):
    """Credentials or token rejected."""


class InvalidCredentialsError(UnauthorizedError):
    """Email or password incorrect."""


class AccountBlockedError(UnauthorizedError):
    """Account is blocked or removed."""


class InvalidTokenError(UnauthorizedError):
    """Token signature, type or claims are invalid."""


class TokenExpiredError(UnauthorizedError):
    """Token expired or superseded by a rotation."""


class InternalError(DomainError):
    """Storage, hashing or signing failure."""

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        super().__init__(message)
