"""Unit tests for key-value storage backends."""

from pathlib import Path

import pytest

from lab_trend_ledger.infrastructure.storage.key_value import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    create_key_value_store,
)
from lab_trend_ledger.utils.exceptions import StorageError
from lab_trend_ledger.utils.parameters import StorageConfig


def test_in_memory_get_after_set() -> None:
    """Test byte-identical reads from the in-memory backend."""
    storage = InMemoryKeyValueStore()

    if storage.get("k") is not None:
        raise AssertionError("Missing key should read as None")

    storage.set("k", b"\x00blob")
    if storage.get("k") != b"\x00blob":
        raise AssertionError("In-memory backend returned different bytes")


def test_file_store_get_after_set(tmp_path: Path) -> None:
    """Test byte-identical reads and overwrite on the file backend."""
    storage = FileKeyValueStore(tmp_path / "data")

    if storage.get("lab_parameters") is not None:
        raise AssertionError("Missing key should read as None")

    storage.set("lab_parameters", "гемоглобин".encode("utf-8"))
    storage.set("lab_parameters", b'{"a":1}')

    if storage.get("lab_parameters") != b'{"a":1}':
        raise AssertionError("File backend returned different bytes")

    leftovers = [p.name for p in (tmp_path / "data").iterdir() if p.suffix == ".tmp"]
    if leftovers:
        raise AssertionError(f"Temporary files left behind: {leftovers}")


def test_file_store_rejects_path_like_keys(tmp_path: Path) -> None:
    """Test that keys cannot escape the storage directory."""
    storage = FileKeyValueStore(tmp_path)

    with pytest.raises(StorageError):
        storage.set("../outside", b"x")


def test_file_store_wraps_os_errors(tmp_path: Path) -> None:
    """Test that unreadable entries surface as StorageError."""
    storage = FileKeyValueStore(tmp_path)
    (tmp_path / "broken.json").mkdir()

    with pytest.raises(StorageError):
        storage.get("broken")


def test_create_key_value_store_from_config(tmp_path: Path) -> None:
    """Test backend selection."""
    memory = create_key_value_store(StorageConfig(backend="memory"))
    if not isinstance(memory, InMemoryKeyValueStore):
        raise AssertionError(f"Expected in-memory backend, got {type(memory)}")

    on_disk = create_key_value_store(StorageConfig(backend="file", dir=str(tmp_path)))
    if not isinstance(on_disk, FileKeyValueStore):
        raise AssertionError(f"Expected file backend, got {type(on_disk)}")
