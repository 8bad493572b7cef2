from abc import ABC
from enum import StrEnum


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class SessionFailureReason(StrEnum):
    """Why a presented token was rejected. Internal only, never sent to the client."""

    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    SECRET_MISMATCH = "secret_mismatch"
    EXPIRED = "expired"


class InvalidSessionError(AuthenticationError):
    """Raised when a session token does not resolve to a live session.

    The message is identical for every reason so that callers cannot
    enumerate session ids. The reason is kept for logging.
    """

    def __init__(self, reason: SessionFailureReason) -> None:
        super().__init__("Invalid or expired session")
        self.reason = reason


class MalformedTokenError(ValueError):
    """Raised when a token does not split into exactly two non-empty parts."""


class ServiceUnavailableError(Exception):
    """Base class for infrastructure failures. Retryable by the caller."""


class StoreError(ServiceUnavailableError):
    """Base class for session store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the underlying storage cannot be reached."""


class DuplicateIdError(StoreError):
    """Raised when inserting a session whose id already exists."""


class CorruptSessionError(StoreError):
    """Raised when a stored session row violates the schema."""


class SessionCreationFailedError(ServiceUnavailableError):
    """Raised when a new session could not be persisted."""
