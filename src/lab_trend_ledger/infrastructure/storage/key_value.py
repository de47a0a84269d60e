"""
Key-value storage backends for snapshot blobs.

The tracker only needs get/set of opaque bytes per key. Backends must
return byte-identical data from get after set with the same key.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from lab_trend_ledger.utils.exceptions import StorageError
from lab_trend_ledger.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    """Persistence capability consumed by the tracker."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, blob: bytes) -> None: ...


class InMemoryKeyValueStore:
    """Process-local backend, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, blob: bytes) -> None:
        self._data[key] = bytes(blob)

    def keys(self) -> list[str]:
        return list(self._data)


class FileKeyValueStore:
    """
    Directory-backed backend storing one file per key.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a partially written blob.
    """

    def __init__(self, directory: str | Path) -> None:
        """
        Initialize file backend.

        Args:
            directory: Directory holding the blobs; created if missing.

        Raises:
            StorageError: If the directory cannot be created.
        """
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {self.directory}: {e}") from e

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, blob: bytes) -> None:
        path = self._path(key)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(blob)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.debug(f"Wrote {len(blob)} bytes to {path}")


def create_key_value_store(config: StorageConfig) -> KeyValueStore:
    """Build the backend selected by configuration."""
    if config.backend == "memory":
        return InMemoryKeyValueStore()
    return FileKeyValueStore(config.dir)
