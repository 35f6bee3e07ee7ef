"""Filesystem access used while resolving request bodies."""

from __future__ import annotations

import os
from typing import Protocol


class FileSystem(Protocol):
    def read_bytes(self, path: str) -> bytes:
        """Return the content of *path*, raising ``OSError`` on failure."""
        ...


class LocalFileSystem:
    """Reads files from the local disk."""

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as fh:
            return fh.read()


def resolve_path(base_dir: str, path: str) -> str:
    """Join *path* onto *base_dir*; absolute paths are returned unchanged."""
    return os.path.normpath(os.path.join(base_dir, os.path.expanduser(path)))
