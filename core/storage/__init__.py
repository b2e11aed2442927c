"""Storage abstraction (S3/MinIO or local filesystem fallback)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Protocol, Union

from core.exceptions import FailureKind, RequestFailure


BAD_REQUEST_CODES = frozenset({"MissingContentLength"})
NOT_MODIFIED_CODES = frozenset({"NotModified", "304"})
NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


@dataclass(frozen=True)
class Found:
    """Object metadata, plus the body iterator for a GET."""

    key: str
    content_type: str
    content_length: int
    last_modified: datetime | None
    etag: str
    body: Iterator[bytes] | None = None


@dataclass(frozen=True)
class Created:
    key: str
    etag: str


@dataclass(frozen=True)
class Deleted:
    key: str


StoreResult = Union[Found, Created, Deleted, RequestFailure]


class ObjectStorage(Protocol):
    def head(self, key: str, if_none_match: str | None = None) -> Found:
        ...

    def get(self, key: str, if_none_match: str | None = None) -> Found:
        ...

    def put(self, key: str, data: bytes, content_type: str | None = None) -> Created:
        ...

    def delete(self, key: str) -> Deleted:
        ...


def classify(
    code: str,
    message: str,
    *,
    key: str | None = None,
    cause: str | None = None,
) -> RequestFailure:
    """Turn a backing store error code into a typed failure.

    Every code maps to exactly one kind; unknown codes are internal errors.
    """
    if code in BAD_REQUEST_CODES:
        return RequestFailure(FailureKind.BAD_REQUEST, "Bad Request", code=code, key=key, cause=cause)
    if code in NOT_MODIFIED_CODES:
        return RequestFailure(FailureKind.NOT_MODIFIED, "Object not modified", code=code, key=key, cause=cause)
    if code in NOT_FOUND_CODES:
        return RequestFailure(FailureKind.NOT_FOUND, message, code=code, key=key, cause=cause)
    return RequestFailure(FailureKind.INTERNAL, message, code=code, key=key, cause=cause)


def internal_failure(exc: BaseException, *, key: str | None = None) -> RequestFailure:
    """Wrap an unexpected local or transport error."""
    cause = exc.__cause__ or exc.__context__
    return RequestFailure(
        FailureKind.INTERNAL,
        str(exc) or type(exc).__name__,
        code=type(exc).__name__,
        key=key,
        cause=str(cause) if cause is not None else None,
    )


__all__ = [
    "Created",
    "Deleted",
    "Found",
    "ObjectStorage",
    "StoreResult",
    "classify",
    "internal_failure",
]
