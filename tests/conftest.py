"""Shared fixtures for pycities tests."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from pycities.exceptions import ErrorKind, NeocitiesAPIError
from pycities.models import ListEntry, SiteInfo

UPDATED_AT = "Sat, 13 Feb 2016 03:04:00 -0000"


class FakeStore:
    """In-memory remote store behaving like a Neocities site.

    Uploading a file creates its parent directories; deleting a directory
    deletes its contents; deleting a missing path fails like the server does.
    """

    def __init__(self, files=None, dirs=None):
        self.files: dict[str, bytes] = dict(files or {})
        self.dirs: set[str] = set(dirs or ())
        for path in self.files:
            self._add_parents(path)
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.closed = False

    def _add_parents(self, path: str) -> None:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.dirs.add("/".join(parts[:i]))

    def list(self) -> list[ListEntry]:
        self.calls.append(("list",))
        entries = [
            ListEntry(path=d, is_directory=True, updated_at=UPDATED_AT)
            for d in self.dirs
        ]
        entries += [
            ListEntry(
                path=path,
                is_directory=False,
                updated_at=UPDATED_AT,
                size=len(data),
                sha1_hash=hashlib.sha1(data).hexdigest(),
            )
            for path, data in self.files.items()
        ]
        return entries

    def upload(self, path: str, data: bytes) -> str:
        self.calls.append(("upload", path, data))
        if path in self.fail_on:
            raise NeocitiesAPIError("file type not allowed", ErrorKind.INVALID_FILE_TYPE)
        if path in self.dirs:
            raise NeocitiesAPIError(f"{path} is a directory", ErrorKind.UNKNOWN)
        self.files[path] = data
        self._add_parents(path)
        return "your file(s) have been successfully uploaded"

    def delete(self, paths: list[str]) -> str:
        self.calls.append(("delete", list(paths)))
        for path in paths:
            if path in self.fail_on or (
                path not in self.files and path not in self.dirs
            ):
                raise NeocitiesAPIError(
                    f"{path} was not found on your site, canceled deleting",
                    ErrorKind.MISSING_FILES,
                )
            prefix = path + "/"
            self.files = {
                p: d
                for p, d in self.files.items()
                if p != path and not p.startswith(prefix)
            }
            self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}
        return "file(s) have been deleted"

    def info(self) -> SiteInfo:
        return SiteInfo(sitename="lorem", views=1, hits=2, created_at=UPDATED_AT)

    def key(self) -> str:
        return "c6275ca833ac06c83926ccb00dff4c82"

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def fake_store():
    """An empty in-memory remote store."""
    return FakeStore()


@pytest.fixture
def site_dir(tmp_path) -> Path:
    """A small local site.

    Layout::

        .neocitiesignore   ("ignored")
        hello              "Hello, world!"
        hello.txt          "Hello, world!"
        empty/
        subdir/goodbye     "Goodbye, world!"
        subdir/ignored     "Ignored"
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / ".neocitiesignore").write_text("ignored")
    (root / "hello").write_text("Hello, world!")
    (root / "hello.txt").write_text("Hello, world!")
    (root / "empty").mkdir()
    subdir = root / "subdir"
    subdir.mkdir()
    (subdir / "goodbye").write_text("Goodbye, world!")
    (subdir / "ignored").write_text("Ignored")
    return root
