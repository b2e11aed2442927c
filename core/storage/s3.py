from __future__ import annotations

from typing import Any, Iterator, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import RequestFailure
from core.storage import Created, Deleted, Found, classify, internal_failure


CHUNK_SIZE = 64 * 1024


def _iter_body(body: Any, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    try:
        yield from body.iter_chunks(chunk_size)
    finally:
        body.close()


class S3Storage:
    """Bucket-backed object storage.

    One boto3 client is created per instance and shared by every request;
    boto3 clients are safe to use from several threads.
    """

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client_kwargs: dict[str, Any] = {"config": Config(signature_version="s3v4")}
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            client = session.client("s3", **client_kwargs)
        self.client = client

    def _failure(self, key: str, exc: Exception) -> RequestFailure:
        if isinstance(exc, ClientError):
            error = exc.response.get("Error", {})
            code = str(error.get("Code") or "Unknown")
            message = error.get("Message") or str(exc)
            cause = exc.__cause__
            return classify(code, message, key=key, cause=str(cause) if cause is not None else None)
        return internal_failure(exc, key=key)

    def _found(self, key: str, response: dict[str, Any], body: Iterator[bytes] | None = None) -> Found:
        return Found(
            key=key,
            content_type=response.get("ContentType") or "binary/octet-stream",
            content_length=int(response.get("ContentLength") or 0),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag", ""),
            body=body,
        )

    def head(self, key: str, if_none_match: str | None = None) -> Found:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if if_none_match:
            params["IfNoneMatch"] = if_none_match
        try:
            response = self.client.head_object(**params)
        except (ClientError, BotoCoreError) as exc:
            raise self._failure(key, exc) from exc
        return self._found(key, response)

    def get(self, key: str, if_none_match: str | None = None) -> Found:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if if_none_match:
            params["IfNoneMatch"] = if_none_match
        try:
            response = self.client.get_object(**params)
        except (ClientError, BotoCoreError) as exc:
            raise self._failure(key, exc) from exc
        return self._found(key, response, body=_iter_body(response["Body"]))

    def put(self, key: str, data: bytes, content_type: str | None = None) -> Created:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            response = self.client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            raise self._failure(key, exc) from exc
        return Created(key=key, etag=response.get("ETag", ""))

    def delete(self, key: str) -> Deleted:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise self._failure(key, exc) from exc
        return Deleted(key=key)


__all__ = ["S3Storage"]
