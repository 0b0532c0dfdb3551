from __future__ import annotations
from typing import Any


class BterClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class MissingCredentialsError(BterClientError):
    """Private endpoint called without an API key and secret. Raised before any I/O."""

    def __init__(self, message: str = "Must provide API key and secret to use the trade API."):
        super().__init__(message)


class TransportError(BterClientError):
    """Socket/timeout failure or a non-200 HTTP status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.method = method
        self.url = url


class MalformedResponseError(BterClientError):
    """Response body is not valid JSON."""

    def __init__(self, message: str, *, body: str | None = None, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.body = body


class ApiError(BterClientError):
    """The exchange answered with an `error` field."""

    def __init__(self, error: Any, *, body: str | None = None):
        super().__init__(str(error))
        self.error = error
        self.body = body
