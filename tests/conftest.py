from __future__ import annotations

from pathlib import Path

import pytest

from core.settings import Settings
from core.storage.local import LocalStorage
from services.api.main import create_app


BUCKET = "site"


def make_settings(root: Path, homepage: str = "index.html") -> Settings:
    return Settings(**{"s3bucket": BUCKET, "homepage": homepage, "localRoot": root, "awsRegion": "eu-west-1"})


@pytest.fixture()
def store(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path, BUCKET)


@pytest.fixture()
def app(tmp_path: Path, store: LocalStorage):
    return create_app(make_settings(tmp_path), store=store)


@pytest.fixture()
def app_without_homepage(tmp_path: Path, store: LocalStorage):
    return create_app(make_settings(tmp_path, homepage=""), store=store)
