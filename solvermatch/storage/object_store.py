"""Byte-range object storage."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Protocol

from solvermatch.shared.errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Returns raw bytes for ``bucket``/``key``, optionally a byte range."""

    def get(
        self,
        bucket: str,
        key: str,
        offset: Optional[int] = None,
        length: Optional[int] = None,
    ) -> bytes:
        """Fetch an object or a slice of it."""


def _check_range(offset: Optional[int], length: Optional[int]) -> None:
    if offset is not None and offset < 0:
        raise StorageError(f"Negative offset {offset}")
    if length is not None and length <= 0:
        raise StorageError(f"Non-positive length {length}")


class LocalObjectStore:
    """
    Objects laid out on disk as ``<root>/<bucket>/<key>``.

    Ranged reads seek instead of loading the whole shard.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, bucket: str, key: str) -> Path:
        path = (self.root / bucket / key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Key escapes storage root: {bucket}/{key}")
        return path

    def get(
        self,
        bucket: str,
        key: str,
        offset: Optional[int] = None,
        length: Optional[int] = None,
    ) -> bytes:
        _check_range(offset, length)
        path = self.path_for(bucket, key)
        try:
            with open(path, "rb") as f:
                if offset:
                    f.seek(offset)
                data = f.read() if length is None else f.read(length)
        except FileNotFoundError as exc:
            raise StorageError(f"Object not found: {bucket}/{key}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {bucket}/{key}: {exc}") from exc

        if length is not None and len(data) != length:
            raise StorageError(
                f"Short read from {bucket}/{key} at offset {offset or 0}: "
                f"wanted {length} bytes, got {len(data)}"
            )
        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def put(self, bucket: str, key: str, data: bytes) -> None:
        path = self.path_for(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


class InMemoryObjectStore:
    """Dictionary-backed store for tests and small corpora."""

    def __init__(self):
        self._objects: dict[tuple[str, str], bytes] = {}
        self._lock = threading.Lock()

    def put(self, bucket: str, key: str, data: bytes) -> None:
        with self._lock:
            self._objects[(bucket, key)] = bytes(data)

    def append(self, bucket: str, key: str, data: bytes) -> tuple[int, int]:
        """Append to an object and return the ``(offset, length)`` of the new bytes."""
        with self._lock:
            current = self._objects.get((bucket, key), b"")
            self._objects[(bucket, key)] = current + bytes(data)
            return len(current), len(data)

    def get(
        self,
        bucket: str,
        key: str,
        offset: Optional[int] = None,
        length: Optional[int] = None,
    ) -> bytes:
        _check_range(offset, length)
        try:
            data = self._objects[(bucket, key)]
        except KeyError:
            raise StorageError(f"Object not found: {bucket}/{key}") from None

        start = offset or 0
        end = len(data) if length is None else start + length
        if end > len(data):
            raise StorageError(
                f"Range {start}:{end} exceeds {bucket}/{key} ({len(data)} bytes)"
            )
        return data[start:end]
