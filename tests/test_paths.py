from __future__ import annotations

import pytest

from core.exceptions import FailureKind, RequestFailure
from core.paths import ResolvedKey, resolve


@pytest.mark.parametrize(
    "raw_path, expected",
    [
        ("/report.txt", "report.txt"),
        ("/dir/page.html", "dir/page.html"),
        ("/a//b", "a//b"),
        ("/../secret", "../secret"),
        ("/%2e%2e/x", "%2e%2e/x"),
    ],
)
@pytest.mark.parametrize("homepage", ["", "index.html"])
def test_file_paths_are_used_verbatim(raw_path: str, expected: str, homepage: str) -> None:
    assert resolve(raw_path, homepage) == ResolvedKey(expected, used_fallback=False)


@pytest.mark.parametrize(
    "raw_path, expected",
    [
        ("/", "index.html"),
        ("", "index.html"),
        ("/dir/", "dir/index.html"),
        ("/a/b/", "a/b/index.html"),
    ],
)
def test_directory_paths_use_default_index(raw_path: str, expected: str) -> None:
    resolved = resolve(raw_path, "index.html")
    assert resolved.storage_key == expected
    assert resolved.used_fallback is True


@pytest.mark.parametrize("raw_path", ["/", "", "/dir/"])
def test_directory_paths_without_default_index_fail(raw_path: str) -> None:
    with pytest.raises(RequestFailure) as excinfo:
        resolve(raw_path, "")

    assert excinfo.value.kind is FailureKind.BAD_REQUEST
    assert excinfo.value.message == "Path must be provided"


def test_only_one_leading_separator_is_stripped() -> None:
    assert resolve("//x", "").storage_key == "/x"
