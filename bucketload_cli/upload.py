"""Upload a directory tree to object storage with a pool of workers.

One call to ``upload`` is one run:

1. Discovering: find the files under ``root`` that match ``pattern``.
2. Dispatching: put one UploadJob per file on the job queue and close it.
3. Draining: start the worker pool and collect exactly one FileResult per
   job, under the run deadline.
4. Done: raise UploadFailedError if any file failed, else return a summary.

Individual file failures never stop the run; they are logged as they happen
and counted. Only a discovery error or the deadline ends a run early.

Basic Usage:
    from bucketload_cli.upload import PoolConfig, upload

    summary = upload(
        PoolConfig(root=Path("output/"), prefix="dataset/v1", pattern="*.parquet"),
        storage,
    )
    print(f"Uploaded {summary.files_uploaded} files")
"""

from __future__ import annotations

import logging
import queue
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from bucketload_cli.config import DEFAULT_TIMEOUT_SECONDS, default_concurrency
from bucketload_cli.discover import DEFAULT_PATTERN, discover_files
from bucketload_cli.errors import (
    ConfigValidationError,
    UploadFailedError,
    UploadTimeoutError,
)
from bucketload_cli.keys import derive_key
from bucketload_cli.pool import FileResult, UploadJob, WorkerPool
from bucketload_cli.progress import NullProgress

if TYPE_CHECKING:
    from bucketload_cli.config import UploaderConfig
    from bucketload_cli.progress import ProgressObserver
    from bucketload_cli.storage import ObjectStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolConfig:
    """What to upload and how wide to fan out.

    Attributes:
        root: Source directory; keys are built relative to it.
        prefix: Key prefix prepended to every relative path.
        pattern: Glob matched against file base names.
        concurrency: Number of worker threads (at least 1).
        deadline: Seconds the whole run may take.
        region: Configured bucket region, used in diagnostics only.
    """

    root: Path
    prefix: str = ""
    pattern: str = DEFAULT_PATTERN
    concurrency: int = field(default_factory=default_concurrency)
    deadline: float = DEFAULT_TIMEOUT_SECONDS
    region: str | None = None

    def validate(self) -> None:
        """Check invariants before any work starts.

        Raises:
            ConfigValidationError: If concurrency < 1, deadline <= 0, or
                root is not an existing directory.
        """
        if self.concurrency < 1:
            raise ConfigValidationError("max_concurrency", "must be at least 1")
        if self.deadline <= 0:
            raise ConfigValidationError("timeout_seconds", "must be positive")
        if not self.root.exists():
            raise ConfigValidationError("local_path", f"directory does not exist: {self.root}")
        if not self.root.is_dir():
            raise ConfigValidationError("local_path", f"not a directory: {self.root}")

    @classmethod
    def from_settings(cls, settings: UploaderConfig) -> PoolConfig:
        return cls(
            root=settings.local_path,
            prefix=settings.s3_prefix,
            pattern=settings.pattern,
            concurrency=settings.max_concurrency,
            deadline=settings.timeout_seconds,
            region=settings.region,
        )


@dataclass
class UploadRun:
    """Running totals for one upload call. Only the coordinator touches it."""

    total: int
    succeeded: int = 0
    failed: int = 0
    bytes_uploaded: int = 0
    failures: list[FileResult] = field(default_factory=list)

    @property
    def drained(self) -> int:
        return self.succeeded + self.failed

    def record(self, result: FileResult) -> None:
        if result.ok:
            self.succeeded += 1
            self.bytes_uploaded += result.bytes_uploaded
        else:
            self.failed += 1
            self.failures.append(result)


@dataclass(frozen=True)
class UploadSummary:
    """Returned by a run in which every file was uploaded."""

    files_found: int
    files_uploaded: int
    bytes_uploaded: int
    elapsed: float

    def to_dict(self) -> dict[str, int | float]:
        return {
            "files_found": self.files_found,
            "files_uploaded": self.files_uploaded,
            "bytes_uploaded": self.bytes_uploaded,
            "elapsed": round(self.elapsed, 3),
        }


def plan_upload(config: PoolConfig) -> list[tuple[Path, str]]:
    """List the (file, key) pairs a run would upload, without uploading.

    Raises:
        DiscoveryError: If the source tree cannot be walked.
        InvalidKeyError: If a file cannot be mapped to a key.
    """
    config.validate()
    files = discover_files(config.root, config.pattern)
    return [(path, derive_key(config.root, config.prefix, path)) for path in files]


def _drain(pool: WorkerPool, run: UploadRun, ends_at: float, deadline: float) -> None:
    """Collect results until every job has reported or the deadline passes."""
    while run.drained < run.total:
        remaining = ends_at - time.monotonic()
        if remaining <= 0:
            raise UploadTimeoutError(deadline, run.drained, run.total)
        try:
            result = pool.results.get(timeout=remaining)
        except queue.Empty:
            raise UploadTimeoutError(deadline, run.drained, run.total) from None
        run.record(result)


def upload(
    config: PoolConfig,
    storage: ObjectStorage,
    *,
    progress: ProgressObserver | None = None,
) -> UploadSummary:
    """Upload every matching file under config.root.

    Args:
        config: Source, prefix, pattern, width and deadline for the run.
        storage: Where objects are written.
        progress: Observer told about the file count up front and about
            each finished file.

    Returns:
        UploadSummary when every file was uploaded (including the zero-file
        case, which starts no workers).

    Raises:
        ConfigValidationError: If config breaks an invariant.
        DiscoveryError: If the source tree cannot be walked.
        UploadFailedError: If one or more files failed.
        UploadTimeoutError: If the deadline elapsed first.
    """
    config.validate()
    observer = progress or NullProgress()
    started = time.monotonic()
    ends_at = started + config.deadline

    logger.info(
        "Starting upload from %s (prefix=%r, pattern=%r)",
        config.root,
        config.prefix,
        config.pattern,
    )

    # Discovering
    files = discover_files(config.root, config.pattern)
    if not files:
        logger.info("No files to upload")
        return UploadSummary(
            files_found=0, files_uploaded=0, bytes_uploaded=0, elapsed=time.monotonic() - started
        )

    logger.info("Found %d file(s) to upload", len(files))
    run = UploadRun(total=len(files))

    if time.monotonic() >= ends_at:
        logger.error("Upload deadline exceeded during discovery; no files were dispatched")
        raise UploadTimeoutError(config.deadline, 0, run.total)

    # Dispatching; no point starting more workers than there are files
    width = min(config.concurrency, len(files))
    pool = WorkerPool(
        storage,
        config.root,
        config.prefix,
        width,
        progress=observer,
        region=config.region,
        ends_at=ends_at,
    )
    for path in files:
        pool.submit(UploadJob(path))
    pool.close_jobs()

    # Draining
    observer.start(run.total)
    pool.start()
    try:
        _drain(pool, run, ends_at, config.deadline)
        pool.join()
    except UploadTimeoutError:
        pool.stop()
        logger.error(
            "Upload deadline exceeded: %d of %d files finished, abandoning %d worker(s)",
            run.drained,
            run.total,
            pool.alive,
        )
        raise
    finally:
        observer.finish()

    elapsed = time.monotonic() - started

    # Done
    if run.failed:
        logger.warning("Upload completed with errors (failed_files=%d)", run.failed)
        raise UploadFailedError(run.failed, run.total, run.failures)

    logger.info("Upload completed successfully (total_files=%d)", run.total)
    return UploadSummary(
        files_found=run.total,
        files_uploaded=run.succeeded,
        bytes_uploaded=run.bytes_uploaded,
        elapsed=elapsed,
    )
