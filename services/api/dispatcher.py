"""Selection of the bucket operation for an HTTP request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

from loguru import logger
from starlette.concurrency import run_in_threadpool

from core.exceptions import MethodNotAllowedFailure, RequestFailure
from core.paths import ResolvedKey
from core.storage import ObjectStorage, StoreResult, internal_failure


SUPPORTED_METHODS = ("GET", "HEAD", "PUT", "DELETE")


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    raw_path: str
    body: AsyncIterator[bytes] | None = None
    if_none_match: str | None = None
    content_type: str | None = None


async def read_body(stream: AsyncIterator[bytes] | None) -> bytes:
    # The whole upload is held in memory before it is sent to the store.
    if stream is None:
        return b""
    chunks = [chunk async for chunk in stream]
    return b"".join(chunks)


class OperationDispatcher:
    def __init__(self, store: ObjectStorage) -> None:
        self.store = store

    async def dispatch(self, request: RequestDescriptor, resolved: ResolvedKey) -> StoreResult:
        """Run the store operation matching ``request.method``.

        Failures are returned, not raised, so the caller has a single result
        to translate.
        """
        key = resolved.storage_key
        method = request.method.upper()
        if method not in SUPPORTED_METHODS:
            return MethodNotAllowedFailure(method)

        logger.debug(
            "{method} {key} (index fallback: {fallback})",
            method=method,
            key=key,
            fallback=resolved.used_fallback,
        )
        try:
            if method == "HEAD":
                return await run_in_threadpool(self.store.head, key, request.if_none_match)
            if method == "GET":
                return await run_in_threadpool(self.store.get, key, request.if_none_match)
            if method == "PUT":
                try:
                    data = await read_body(request.body)
                except Exception as exc:
                    raise internal_failure(exc, key=key) from exc
                return await run_in_threadpool(self.store.put, key, data, request.content_type)
            return await run_in_threadpool(self.store.delete, key)
        except RequestFailure as failure:
            return failure
        except Exception as exc:
            logger.exception("Unexpected error during {method} {key}", method=method, key=key)
            return internal_failure(exc, key=key)
