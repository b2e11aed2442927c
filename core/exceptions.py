"""Custom exception hierarchy for the S3 web server."""

from __future__ import annotations

from enum import Enum


class S3WebError(Exception):
    """Base exception for all S3 web server errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(S3WebError):
    """Raised when configuration is invalid or missing."""
    pass


class StorageError(S3WebError):
    """Raised when a storage backend cannot be constructed or used."""
    pass


class FailureKind(str, Enum):
    """Classification of a failed request."""

    BAD_REQUEST = "BadRequest"
    NOT_MODIFIED = "NotModified"
    NOT_FOUND = "NotFound"
    INTERNAL = "Internal"


class RequestFailure(S3WebError):
    """Typed failure of a request, whatever layer produced it.

    ``code`` is the raw error code reported by the backing store (or the
    exception class name for local errors) and ``cause`` the text of the
    underlying error, when there is one.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        *,
        code: str | None = None,
        cause: str | None = None,
        key: str | None = None,
    ) -> None:
        details = {"kind": kind.value}
        if code:
            details["code"] = code
        if key is not None:
            details["key"] = key
        super().__init__(message, details)
        self.kind = kind
        self.code = code or kind.value
        self.cause = cause
        self.key = key

    def __repr__(self) -> str:
        return f"RequestFailure(kind={self.kind.value}, code={self.code!r}, message={self.message!r})"


class MethodNotAllowedFailure(RequestFailure):
    """Raised when the HTTP method has no matching bucket operation."""

    def __init__(self, method: str) -> None:
        super().__init__(
            FailureKind.BAD_REQUEST,
            f"Method {method} not supported",
            code="MethodNotAllowed",
        )
        self.method = method
