"""Shared pytest fixtures for bucketload tests."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

import pytest

from bucketload_cli.errors import StorageError, StorageErrorKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

# =============================================================================
# Fake storage
# =============================================================================


class FakeStorage:
    """In-memory ObjectStorage that records every put.

    Keys listed in ``fail_keys`` raise a StorageError of ``fail_kind``.
    Thread-safe: puts arrive from several workers at once.
    """

    def __init__(
        self,
        fail_keys: set[str] | None = None,
        fail_kind: StorageErrorKind = StorageErrorKind.TRANSIENT,
    ) -> None:
        self.fail_keys = fail_keys or set()
        self.fail_kind = fail_kind
        self.objects: dict[str, bytes] = {}
        self.attempts: list[str] = []
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def put(self, key: str, body: BinaryIO) -> None:
        data = body.read()
        with self._lock:
            self.attempts.append(key)
            self.threads.add(threading.current_thread().name)
            if key in self.fail_keys:
                raise StorageError(key, self.fail_kind, "simulated failure")
            self.objects[key] = data


class BlockingStorage:
    """ObjectStorage whose put never returns until ``release`` is set."""

    def __init__(self) -> None:
        self.release = threading.Event()
        self.entered = threading.Event()

    def put(self, key: str, body: BinaryIO) -> None:
        self.entered.set()
        self.release.wait()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def make_storage() -> Callable[..., FakeStorage]:
    """Factory for FakeStorage with chosen failing keys."""
    return FakeStorage


@pytest.fixture
def blocking_storage() -> Iterator[BlockingStorage]:
    storage = BlockingStorage()
    yield storage
    # Let abandoned workers finish so the interpreter can exit cleanly
    storage.release.set()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers the CLI attached to a CliRunner stream, which closes after invoke."""
    logger = logging.getLogger("bucketload_cli")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


# =============================================================================
# Source trees
# =============================================================================


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Directory with files at several depths and mixed extensions."""
    root = tmp_path / "data"
    root.mkdir()
    (root / "a.txt").write_text("alpha")
    (root / "b.log").write_text("bravo")
    (root / "c.txt").write_text("charlie")
    (root / "nested").mkdir()
    (root / "nested" / "d.txt").write_text("delta")
    (root / "nested" / "deeper").mkdir()
    (root / "nested" / "deeper" / "e.csv").write_text("echo")
    (root / "empty_dir").mkdir()
    return root


@pytest.fixture
def empty_tree(tmp_path: Path) -> Path:
    root = tmp_path / "empty"
    root.mkdir()
    (root / "only_dirs").mkdir()
    return root
