"""Error taxonomy for the SafeComms client.

Every failure surfaced by the client is a :class:`SafeCommsError`.  The
subclass tells the caller whether to fix its setup, fix its input, retry,
or re-authenticate.  Nothing is retried inside the library.
"""

from __future__ import annotations


class SafeCommsError(Exception):
    """Base class for all client errors."""

    retryable = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# ---- local ----
class ConfigurationError(SafeCommsError):
    """Raised when the client is constructed with unusable settings."""


class ValidationError(SafeCommsError):
    """Raised when caller input is rejected before any request is sent."""


# ---- transport ----
class NetworkError(SafeCommsError):
    """Raised when the request never produced an HTTP response."""

    retryable = True


# ---- remote ----
class AuthenticationError(SafeCommsError):
    """Raised when the service rejects the API key (401/403)."""


class RateLimitError(SafeCommsError):
    """Raised when the account's request or token quota is exhausted (429)."""

    retryable = True

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.retry_after = retry_after


class ServerError(SafeCommsError):
    """Raised for any other non-success response."""

    def __init__(self, message: str, status_code: int | None = None, detail: str = "") -> None:
        super().__init__(message, status_code)
        self.detail = detail

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code is not None and self.status_code >= 500


class DecodeError(SafeCommsError):
    """Raised when a success response body does not have the expected shape."""
