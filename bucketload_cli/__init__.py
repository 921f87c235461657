"""bucketload - Upload a local directory tree to an S3 bucket with concurrent workers."""

from bucketload_cli.cli import cli
from bucketload_cli.discover import discover_files
from bucketload_cli.keys import derive_key
from bucketload_cli.upload import PoolConfig, UploadSummary, plan_upload, upload

__all__ = [
    "PoolConfig",
    "UploadSummary",
    "cli",
    "derive_key",
    "discover_files",
    "plan_upload",
    "upload",
]
