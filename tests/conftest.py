"""Shared fixtures for the httper test suite."""

import errno

import pytest
import requests


class MemoryFileSystem:
    """In-memory stand-in for the local filesystem."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})
        self.reads: list[str] = []

    def read_bytes(self, path: str) -> bytes:
        self.reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(
                errno.ENOENT, "No such file or directory", path
            ) from None


@pytest.fixture
def memfs():
    return MemoryFileSystem(
        {
            "/data/img/beach.png": b"\x89PNG fake image",
            "/data/payload.json": b'{"from": "file"}',
            "/data/notes.txt": b"some notes",
        }
    )


@pytest.fixture
def session():
    with requests.Session() as s:
        yield s
