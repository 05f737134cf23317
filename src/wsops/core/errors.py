"""Error taxonomy for workspace operations.

Every failure raised by the engine derives from WorkspaceError so frontends
can catch one type. Validation errors are also ValueErrors and are raised
before any remote call is attempted.
"""

from __future__ import annotations


class WorkspaceError(RuntimeError):
    """Base class for all workspace engine errors."""


class InvalidPath(WorkspaceError, ValueError):
    """Raised when a workspace path is malformed."""


class FingerprintError(WorkspaceError, ValueError):
    """Raised when notebook content cannot be fingerprinted."""


class InvalidEncoding(FingerprintError):
    """Raised when a payload is not valid base64."""


class InvalidPayload(FingerprintError):
    """Raised when a decoded payload is not a valid archive or descriptor."""


class RemoteError(WorkspaceError):
    """
    A remote call was rejected.

    The string form is the remote message verbatim so callers can surface it
    unchanged.

    Attributes:
        code: Remote error code (e.g. INVALID_REQUEST), may be empty.
        message: Human-readable message from the remote store.
        status: HTTP status code, or None for transport failures.
    """

    def __init__(self, code: str, message: str, status: int | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message={self.message!r}, status={self.status!r})"
        )


class NotFound(RemoteError):
    """The remote object does not exist."""


class RetryExhausted(RemoteError):
    """Transient overload persisted past the retry ceiling."""

    def __init__(self, attempts: int, message: str, status: int | None = 429):
        super().__init__("TOO_MANY_REQUESTS", message, status)
        self.attempts = attempts
