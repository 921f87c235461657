"""Structured error codes for bucketload.

All errors follow the format BKLD-{category}{number}:
- BKLD-CFG*: Configuration errors
- BKLD-DSC*: Discovery errors
- BKLD-KEY*: Object key errors
- BKLD-STO*: Storage errors
- BKLD-UPL*: Upload run errors
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bucketload_cli.pool import FileResult


class BucketloadError(Exception):
    """Base class for all bucketload errors.

    All errors have:
    - code: Structured error code (e.g., BKLD-CFG001)
    - message: Human-readable error message
    """

    code: str = "BKLD-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a bucketload error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Configuration Errors (BKLD-CFG*)
class ConfigError(BucketloadError):
    """Base class for configuration-related errors."""

    code = "BKLD-CFG000"


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file cannot be opened.

    Error code: BKLD-CFG001
    """

    code = "BKLD-CFG001"

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}", path=path)


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Error code: BKLD-CFG002
    """

    code = "BKLD-CFG002"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


class ConfigInvalidStructureError(ConfigError):
    """Raised when a configuration file has an invalid structure.

    Error code: BKLD-CFG003
    """

    code = "BKLD-CFG003"

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Invalid config structure in {path}: {detail}",
            path=path,
            detail=detail,
        )


class ConfigValidationError(ConfigError):
    """Raised when a required setting is missing or points at nothing usable.

    Error code: BKLD-CFG004
    """

    code = "BKLD-CFG004"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid setting '{field}': {reason}", field=field, reason=reason)


# Discovery Errors (BKLD-DSC*)
class DiscoveryError(BucketloadError):
    """Base class for file discovery errors."""

    code = "BKLD-DSC000"


class InvalidPatternError(DiscoveryError):
    """Raised when a glob pattern is malformed.

    Error code: BKLD-DSC001
    """

    code = "BKLD-DSC001"

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern '{pattern}': {reason}", pattern=pattern, reason=reason)


class TraversalError(DiscoveryError):
    """Raised when an entry under the source directory cannot be read.

    Error code: BKLD-DSC002
    """

    code = "BKLD-DSC002"

    def __init__(self, path: str, original_error: OSError) -> None:
        super().__init__(
            f"Cannot read {path}: {original_error.strerror or original_error}",
            path=path,
            original_error_type=type(original_error).__name__,
        )
        self.original_exception = original_error


# Object Key Errors (BKLD-KEY*)
class InvalidKeyError(BucketloadError):
    """Raised when a file cannot be mapped to a valid object key.

    Error code: BKLD-KEY001
    """

    code = "BKLD-KEY001"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot derive object key for {path}: {reason}", path=path, reason=reason)


# Storage Errors (BKLD-STO*)
class StorageErrorKind(str, Enum):
    """Classification of a failed put, as reported by the storage adapter."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    AUTH = "auth"
    REGION_MISMATCH = "region-mismatch"


class StorageError(BucketloadError):
    """Raised by a storage adapter when a put fails.

    Error code: BKLD-STO000
    """

    code = "BKLD-STO000"

    def __init__(self, key: str, kind: StorageErrorKind, reason: str) -> None:
        super().__init__(
            f"Put failed for '{key}' ({kind.value}): {reason}",
            key=key,
            kind=kind,
            reason=reason,
        )


# Upload Run Errors (BKLD-UPL*)
class UploadError(BucketloadError):
    """Base class for run-level upload errors."""

    code = "BKLD-UPL000"


class UploadFailedError(UploadError):
    """Raised when one or more files in a run failed to upload.

    Error code: BKLD-UPL001

    Per-file reasons are logged as they happen; ``failures`` keeps the
    failed results for programmatic access (not serialized).
    """

    code = "BKLD-UPL001"

    def __init__(self, failed: int, total: int, failures: list[FileResult] | None = None) -> None:
        super().__init__(f"Failed to upload {failed} of {total} files", failed=failed, total=total)
        self.failures = failures or []


class UploadTimeoutError(UploadError):
    """Raised when the run deadline elapses before every result is in.

    Error code: BKLD-UPL002
    """

    code = "BKLD-UPL002"

    def __init__(self, deadline: float, completed: int, total: int) -> None:
        super().__init__(
            f"Upload deadline of {deadline:g}s exceeded after {completed} of {total} files",
            deadline=deadline,
            completed=completed,
            total=total,
        )
