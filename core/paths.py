"""Mapping of request paths onto bucket keys."""

from __future__ import annotations

from dataclasses import dataclass

from core.exceptions import FailureKind, RequestFailure


SEPARATOR = "/"


@dataclass(frozen=True)
class ResolvedKey:
    storage_key: str
    used_fallback: bool = False


def resolve(raw_path: str, default_index_name: str = "") -> ResolvedKey:
    """Derive the object key for a request path.

    Only the leading separator is removed; the rest of the path is used
    verbatim (no ``..`` or duplicate-slash normalisation). A path denoting a
    directory gets ``default_index_name`` appended.

    Raises:
        RequestFailure: BadRequest when the path denotes a directory and no
            default index name is configured.
    """
    candidate = raw_path[1:] if raw_path.startswith(SEPARATOR) else raw_path
    if candidate == "" or candidate.endswith(SEPARATOR):
        if not default_index_name:
            raise RequestFailure(FailureKind.BAD_REQUEST, "Path must be provided", key=candidate)
        return ResolvedKey(candidate + default_index_name, used_fallback=True)
    return ResolvedKey(candidate)


__all__ = ["ResolvedKey", "resolve"]
