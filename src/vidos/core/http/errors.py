from __future__ import annotations

from .classify import ClassifiedError, render_error


class VidosHTTPError(RuntimeError):
    """Base error for management API request operations."""

    def __init__(self, message: str, *, method: str = "", url: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code


class RequestBuildError(VidosHTTPError):
    """Raised before any network call when the request cannot be built."""


class TransportError(VidosHTTPError):
    """Raised when request retries are exhausted for transport errors."""


class APIStatusError(VidosHTTPError):
    def __init__(self, method: str, url: str, status_code: int, error: ClassifiedError, *, retryable: bool) -> None:
        super().__init__(render_error(method, url, error), method=method, url=url, status_code=status_code)
        self.error = error
        self.retryable = retryable


class ResponseDecodeError(VidosHTTPError):
    """Raised when a 2xx body does not match the requested output type."""


class DeletionUnconfirmedError(VidosHTTPError):
    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(
            f"DELETE {url} failed: deletion accepted but resource still visible after {attempts} attempts",
            method="DELETE",
            url=url,
        )
        self.attempts = attempts
