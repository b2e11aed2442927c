"""Mapping of store results onto HTTP responses."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from urllib.parse import quote

from fastapi import status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from loguru import logger

from core.exceptions import FailureKind, MethodNotAllowedFailure, RequestFailure
from core.storage import Created, Deleted, Found, StoreResult
from services.api.dispatcher import SUPPORTED_METHODS


def http_date(value: datetime | None) -> str | None:
    if value is None:
        return None
    aware = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return format_datetime(aware.astimezone(timezone.utc), usegmt=True)


def object_headers(found: Found) -> dict[str, str]:
    headers = {
        "Content-Type": found.content_type,
        "Content-Length": str(found.content_length),
        "Etag": found.etag,
    }
    last_modified = http_date(found.last_modified)
    if last_modified:
        headers["Last-Modified"] = last_modified
    return headers


def failure_body(failure: RequestFailure) -> str:
    if failure.kind is FailureKind.NOT_FOUND:
        return f"Path '{failure.key or ''}' not found: {failure.message}"
    if failure.kind is FailureKind.INTERNAL:
        cause = f" (Cause: {failure.cause})" if failure.cause else ""
        return f"An internal error occurred: {failure.code} = {failure.message}{cause}"
    return failure.message


def translate_failure(failure: RequestFailure) -> Response:
    logger.debug("Failed : {failure!r}", failure=failure)
    if isinstance(failure, MethodNotAllowedFailure):
        return PlainTextResponse(
            failure.message,
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": ", ".join(SUPPORTED_METHODS)},
        )
    if failure.kind is FailureKind.NOT_MODIFIED:
        # A 304 never carries a body.
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    status_code = {
        FailureKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
        FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
        FailureKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
    }[failure.kind]
    return PlainTextResponse(failure_body(failure), status_code=status_code)


def translate(result: StoreResult, method: str = "GET") -> Response:
    """Build the HTTP response for a store result.

    Every result variant maps to exactly one status code and header set.
    """
    if isinstance(result, RequestFailure):
        return translate_failure(result)
    if isinstance(result, Found):
        headers = object_headers(result)
        if method.upper() == "HEAD" or result.body is None:
            return Response(status_code=status.HTTP_200_OK, headers=headers)
        return StreamingResponse(result.body, status_code=status.HTTP_200_OK, headers=headers)
    if isinstance(result, Created):
        return Response(
            status_code=status.HTTP_201_CREATED,
            headers={"ETag": result.etag, "Location": quote("/" + result.key)},
        )
    if isinstance(result, Deleted):
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    raise TypeError(f"Unsupported store result: {type(result).__name__}")


__all__ = ["translate", "translate_failure", "failure_body", "http_date"]
