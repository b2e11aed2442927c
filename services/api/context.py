from __future__ import annotations

from dataclasses import dataclass, field

from botocore.exceptions import BotoCoreError
from loguru import logger

from core.exceptions import StorageError
from core.settings import Settings
from core.storage import ObjectStorage
from core.storage.local import LocalStorage
from core.storage.s3 import S3Storage
from services.api.dispatcher import OperationDispatcher


@dataclass(frozen=True)
class AppContext:
    """Process-wide, read-only state shared by every request."""

    settings: Settings
    store: ObjectStorage
    dispatcher: OperationDispatcher = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dispatcher", OperationDispatcher(self.store))


def build_store(settings: Settings) -> ObjectStorage:
    """Create the storage backend named by the settings."""
    try:
        if settings.local_root is not None:
            logger.info(
                "Serving bucket {bucket} from local directory {root}",
                bucket=settings.s3_bucket,
                root=settings.local_root,
            )
            return LocalStorage(settings.local_root, settings.s3_bucket)

        logger.info(
            "Serving S3 bucket {bucket} in region {region}",
            bucket=settings.s3_bucket,
            region=settings.aws_region,
        )
        return S3Storage(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            endpoint_url=settings.endpoint_url,
        )
    except (OSError, BotoCoreError) as exc:
        raise StorageError(f"failed to set up storage: {exc}", {"bucket": settings.s3_bucket}) from exc


__all__ = ["AppContext", "build_store"]
