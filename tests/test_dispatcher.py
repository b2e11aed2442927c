from __future__ import annotations

from typing import AsyncIterator

import pytest

from core.exceptions import FailureKind, MethodNotAllowedFailure, RequestFailure
from core.paths import ResolvedKey
from core.storage import Created, Deleted, Found, classify
from services.api.dispatcher import OperationDispatcher, RequestDescriptor, read_body


class RecordingStore:
    """Store double that records calls and replays a scripted outcome."""

    def __init__(self, outcome=None) -> None:
        self.calls: list[tuple] = []
        self.outcome = outcome

    def _reply(self, default):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome if self.outcome is not None else default

    def head(self, key, if_none_match=None):
        self.calls.append(("head", key, if_none_match))
        return self._reply(Found(key, "text/plain", 1, None, '"e"'))

    def get(self, key, if_none_match=None):
        self.calls.append(("get", key, if_none_match))
        return self._reply(Found(key, "text/plain", 1, None, '"e"', body=iter([b"x"])))

    def put(self, key, data, content_type=None):
        self.calls.append(("put", key, data, content_type))
        return self._reply(Created(key, '"e"'))

    def delete(self, key):
        self.calls.append(("delete", key))
        return self._reply(Deleted(key))


async def _chunks(*parts: bytes) -> AsyncIterator[bytes]:
    for part in parts:
        yield part


async def _broken_stream() -> AsyncIterator[bytes]:
    yield b"partial"
    raise ConnectionResetError("client went away")


KEY = ResolvedKey("report.txt")


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "method, expected_call",
    [
        ("GET", ("get", "report.txt", '"old"')),
        ("HEAD", ("head", "report.txt", '"old"')),
        ("DELETE", ("delete", "report.txt")),
        ("get", ("get", "report.txt", '"old"')),
    ],
)
async def test_methods_select_store_operation(method: str, expected_call: tuple) -> None:
    store = RecordingStore()
    dispatcher = OperationDispatcher(store)

    await dispatcher.dispatch(RequestDescriptor(method, "/report.txt", if_none_match='"old"'), KEY)

    assert store.calls == [expected_call]


@pytest.mark.asyncio()
async def test_put_buffers_whole_body() -> None:
    store = RecordingStore()
    dispatcher = OperationDispatcher(store)
    request = RequestDescriptor("PUT", "/report.txt", body=_chunks(b"he", b"ll", b"o"), content_type="text/plain")

    result = await dispatcher.dispatch(request, KEY)

    assert result == Created("report.txt", '"e"')
    assert store.calls == [("put", "report.txt", b"hello", "text/plain")]


@pytest.mark.asyncio()
async def test_put_body_read_failure_is_internal() -> None:
    store = RecordingStore()
    dispatcher = OperationDispatcher(store)
    request = RequestDescriptor("PUT", "/report.txt", body=_broken_stream())

    result = await dispatcher.dispatch(request, KEY)

    assert isinstance(result, RequestFailure)
    assert result.kind is FailureKind.INTERNAL
    assert result.code == "ConnectionResetError"
    assert store.calls == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("method", ["PATCH", "POST", "OPTIONS"])
async def test_unsupported_method_skips_store(method: str) -> None:
    store = RecordingStore()
    dispatcher = OperationDispatcher(store)

    result = await dispatcher.dispatch(RequestDescriptor(method, "/report.txt"), KEY)

    assert isinstance(result, MethodNotAllowedFailure)
    assert result.message == f"Method {method} not supported"
    assert store.calls == []


@pytest.mark.asyncio()
async def test_store_failures_are_returned() -> None:
    failure = classify("NoSuchKey", "The specified key does not exist.", key="report.txt")
    dispatcher = OperationDispatcher(RecordingStore(outcome=failure))

    result = await dispatcher.dispatch(RequestDescriptor("GET", "/report.txt"), KEY)

    assert result is failure


@pytest.mark.asyncio()
async def test_unexpected_store_errors_become_internal_failures() -> None:
    dispatcher = OperationDispatcher(RecordingStore(outcome=ValueError("bad state")))

    result = await dispatcher.dispatch(RequestDescriptor("HEAD", "/report.txt"), KEY)

    assert isinstance(result, RequestFailure)
    assert result.kind is FailureKind.INTERNAL
    assert result.message == "bad state"


@pytest.mark.asyncio()
async def test_repeated_deletes_each_reach_the_store() -> None:
    store = RecordingStore()
    dispatcher = OperationDispatcher(store)
    request = RequestDescriptor("DELETE", "/report.txt")

    first = await dispatcher.dispatch(request, KEY)
    second = await dispatcher.dispatch(request, KEY)

    assert first == second == Deleted("report.txt")
    assert store.calls == [("delete", "report.txt"), ("delete", "report.txt")]


@pytest.mark.asyncio()
async def test_read_body_without_stream() -> None:
    assert await read_body(None) == b""
