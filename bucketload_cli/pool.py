"""Bounded pool of upload workers.

A WorkerPool starts a fixed number of threads that all pull UploadJobs from
one shared queue. Every job yields exactly one FileResult on the results
queue, whether the upload worked or not; a failed file never stops a worker
or its siblings.

The caller closes the job queue with close_jobs() once everything has been
enqueued. Workers finish whatever is still queued and then exit.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bucketload_cli.errors import StorageError, StorageErrorKind
from bucketload_cli.keys import derive_key
from bucketload_cli.progress import NullProgress

if TYPE_CHECKING:
    from bucketload_cli.progress import ProgressObserver
    from bucketload_cli.storage import ObjectStorage

logger = logging.getLogger(__name__)

# Marks the end of the job queue; one per worker
_CLOSE = None


@dataclass(frozen=True)
class UploadJob:
    """One local file waiting to be uploaded."""

    path: Path


@dataclass(frozen=True)
class FileResult:
    """Outcome of a single UploadJob.

    Attributes:
        path: Local file that was processed.
        key: Object key it was written to (None if no key could be derived).
        error: The exception that failed the job, or None on success.
        bytes_uploaded: Size of the file when the upload succeeded, else 0.
        duration: Wall-clock seconds spent on the job.
    """

    path: Path
    key: str | None
    error: Exception | None = None
    bytes_uploaded: int = 0
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class WorkerPool:
    """Fixed-width set of threads draining a shared job queue."""

    def __init__(
        self,
        storage: ObjectStorage,
        root: Path,
        prefix: str,
        width: int,
        *,
        progress: ProgressObserver | None = None,
        region: str | None = None,
        ends_at: float | None = None,
    ) -> None:
        if width < 1:
            raise ValueError(f"Pool width must be at least 1, got {width}")
        self.storage = storage
        self.root = root
        self.prefix = prefix
        self.width = width
        self.progress = progress or NullProgress()
        self.region = region
        # time.monotonic() value after which no new job is started
        self.ends_at = ends_at

        self.jobs: queue.Queue[UploadJob | None] = queue.Queue()
        self.results: queue.Queue[FileResult] = queue.Queue()
        self._progress_lock = threading.Lock()
        self._cancelled = threading.Event()
        self._threads: list[threading.Thread] = []

    def submit(self, job: UploadJob) -> None:
        self.jobs.put(job)

    def close_jobs(self) -> None:
        """Signal that no more jobs will arrive."""
        for _ in range(self.width):
            self.jobs.put(_CLOSE)

    def start(self) -> None:
        """Spawn the worker threads."""
        if self._threads:
            raise RuntimeError("WorkerPool already started")
        for i in range(self.width):
            # Daemon threads: a put that never returns must not keep the process alive
            thread = threading.Thread(target=self._work, name=f"upload-worker-{i}", daemon=True)
            self._threads.append(thread)
            thread.start()
        logger.debug("Started %d upload worker(s)", self.width)

    def stop(self) -> None:
        """Stop handing out jobs. In-flight puts are abandoned, not interrupted."""
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> None:
        for thread in self._threads:
            thread.join(timeout)

    @property
    def alive(self) -> int:
        return sum(1 for t in self._threads if t.is_alive())

    def _work(self) -> None:
        while not self._cancelled.is_set():
            job = self.jobs.get()
            if job is _CLOSE:
                return
            if self._cancelled.is_set():
                return
            if self.ends_at is not None and time.monotonic() >= self.ends_at:
                self._cancelled.set()
                return
            result = self._upload(job)
            self.results.put(result)
            with self._progress_lock:
                self.progress.advance()

    def _upload(self, job: UploadJob) -> FileResult:
        start = time.perf_counter()
        key: str | None = None
        try:
            key = derive_key(self.root, self.prefix, job.path)
            with job.path.open("rb") as body:
                size = job.path.stat().st_size
                self.storage.put(key, body)
        except Exception as e:
            duration = time.perf_counter() - start
            self._log_failure(job.path, key, e)
            return FileResult(job.path, key, error=e, duration=duration)

        duration = time.perf_counter() - start
        logger.debug("Uploaded %s -> %s (%d bytes, %.3fs)", job.path, key, size, duration)
        return FileResult(job.path, key, bytes_uploaded=size, duration=duration)

    def _log_failure(self, path: Path, key: str | None, exc: Exception) -> None:
        logger.error("Upload failed for %s: %s", path, exc)
        if isinstance(exc, StorageError) and exc.kind is StorageErrorKind.REGION_MISMATCH:
            logger.error(
                "Bucket region does not match configured region %s (file=%s, key=%s)",
                self.region or "unset",
                path,
                key,
            )
