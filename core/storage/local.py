from __future__ import annotations

import hashlib
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from loguru import logger

from core.exceptions import FailureKind, RequestFailure
from core.storage import Created, Deleted, Found, classify, internal_failure


CHUNK_SIZE = 64 * 1024
NO_SUCH_KEY = "The specified key does not exist."


def _etag(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as fp:
        for chunk in iter(lambda: fp.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return f'"{digest.hexdigest()}"'


def _tag_matches(if_none_match: str, etag: str) -> bool:
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate and candidate.strip('"') == etag.strip('"'):
            return True
    return False


def _iter_file(path: Path) -> Iterator[bytes]:
    with path.open("rb") as fp:
        for chunk in iter(lambda: fp.read(CHUNK_SIZE), b""):
            yield chunk


class LocalStorage:
    """Filesystem stand-in for a bucket: objects are files under ``root/bucket``.

    Content types are guessed from the key since no metadata is stored
    alongside the files.
    """

    def __init__(self, root: Path, bucket: str) -> None:
        self.root = (root / bucket).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise RequestFailure(
                FailureKind.BAD_REQUEST,
                f"Key '{key}' escapes the storage root",
                code="InvalidObjectName",
                key=key,
            )
        return path

    def _existing(self, key: str) -> Path:
        path = self._path(key)
        if not path.is_file():
            raise classify("NoSuchKey", NO_SUCH_KEY, key=key)
        return path

    def _found(self, key: str, path: Path, if_none_match: str | None, body: bool) -> Found:
        try:
            stat = path.stat()
            etag = _etag(path)
        except OSError as exc:
            raise internal_failure(exc, key=key) from exc
        if if_none_match and _tag_matches(if_none_match, etag):
            raise classify("NotModified", "Not Modified", key=key)
        content_type, _ = mimetypes.guess_type(key)
        return Found(
            key=key,
            content_type=content_type or "application/octet-stream",
            content_length=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            etag=etag,
            body=_iter_file(path) if body else None,
        )

    def head(self, key: str, if_none_match: str | None = None) -> Found:
        return self._found(key, self._existing(key), if_none_match, body=False)

    def get(self, key: str, if_none_match: str | None = None) -> Found:
        return self._found(key, self._existing(key), if_none_match, body=True)

    def put(self, key: str, data: bytes, content_type: str | None = None) -> Created:
        path = self._path(key)
        if path.is_dir():
            raise RequestFailure(
                FailureKind.BAD_REQUEST,
                f"Key '{key}' names a folder, not an object",
                code="InvalidObjectName",
                key=key,
            )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise internal_failure(exc, key=key) from exc
        logger.debug("Stored {size} bytes at {path}", size=len(data), path=path)
        return Created(key=key, etag=f'"{hashlib.md5(data).hexdigest()}"')

    def delete(self, key: str) -> Deleted:
        path = self._path(key)
        # Folders are not objects; nothing to delete.
        if path.is_dir():
            return Deleted(key=key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise internal_failure(exc, key=key) from exc
        return Deleted(key=key)


__all__ = ["LocalStorage"]
