"""Object storage port and its obstore-backed implementation.

The rest of bucketload only knows the ObjectStorage protocol: one ``put``
that either returns or raises a StorageError whose ``kind`` says what went
wrong. Translating obstore's exceptions into those kinds happens here and
nowhere else.

Basic Usage:
    from bucketload_cli.storage import build_storage

    storage = build_storage(settings)
    with open("data.parquet", "rb") as body:
        storage.put("dataset/data.parquet", body)
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, BinaryIO, Protocol

import obstore as obs
from obstore.exceptions import (
    InvalidPathError,
    NotFoundError,
    NotSupportedError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from obstore.store import S3Store

from bucketload_cli.config import DEFAULT_REGION
from bucketload_cli.credentials import resolve_credentials
from bucketload_cli.errors import ConfigValidationError, StorageError, StorageErrorKind

if TYPE_CHECKING:
    from obstore.store import ObjectStore

    from bucketload_cli.config import UploaderConfig

logger = logging.getLogger(__name__)

# Fragments S3 puts in responses when the bucket lives in another region
_REGION_MARKERS = (
    "permanentredirect",
    "authorizationheadermalformed",
    "region",
)


class ObjectStorage(Protocol):
    """Anything that can store a byte stream under a key."""

    def put(self, key: str, body: BinaryIO) -> None:
        """Store body under key.

        Raises:
            StorageError: If the object could not be written.
        """
        ...


def classify_error(exc: Exception) -> StorageErrorKind:
    """Map an obstore exception onto a StorageErrorKind."""
    if isinstance(exc, (UnauthenticatedError, PermissionDeniedError)):
        return StorageErrorKind.AUTH
    message = str(exc).lower()
    if any(marker in message for marker in _REGION_MARKERS):
        return StorageErrorKind.REGION_MISMATCH
    if isinstance(exc, (NotFoundError, InvalidPathError, NotSupportedError)):
        return StorageErrorKind.PERMANENT
    return StorageErrorKind.TRANSIENT


class ObstoreStorage:
    """ObjectStorage backed by an obstore store."""

    def __init__(self, store: ObjectStore, *, chunk_concurrency: int = 12) -> None:
        self.store = store
        self.chunk_concurrency = chunk_concurrency

    def put(self, key: str, body: BinaryIO) -> None:
        try:
            obs.put(self.store, key, body, max_concurrency=self.chunk_concurrency)
        except Exception as e:
            raise StorageError(key, classify_error(e), str(e)) from e


def resolve_region(configured: str | None, profile_region: str | None = None) -> str:
    """Pick the bucket region: config > AWS_REGION > profile config > us-east-1."""
    return (
        configured
        or os.environ.get("AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
        or profile_region
        or DEFAULT_REGION
    )


def store_region(settings: UploaderConfig) -> str:
    """Region build_storage() will use, including one from the AWS profile."""
    creds = resolve_credentials(settings.access_key, settings.secret_key, settings.aws_profile)
    return resolve_region(settings.region, creds.profile_region)


def build_storage(settings: UploaderConfig) -> ObstoreStorage:
    """Create an S3-backed ObstoreStorage from validated settings.

    Credentials come from resolve_credentials(); if none are found the store
    is built without keys and obstore uses its own environment discovery.
    A custom endpoint switches to path-style addressing (MinIO and friends).
    """
    creds = resolve_credentials(settings.access_key, settings.secret_key, settings.aws_profile)
    region = resolve_region(settings.region, creds.profile_region)

    store_kwargs: dict[str, object] = {"region": region}
    if creds.complete:
        store_kwargs["access_key_id"] = creds.access_key_id
        store_kwargs["secret_access_key"] = creds.secret_access_key

    if settings.endpoint:
        protocol = "https" if settings.use_ssl else "http"
        endpoint = settings.endpoint
        if "://" not in endpoint:
            endpoint = f"{protocol}://{endpoint}"
        store_kwargs["endpoint"] = endpoint
        store_kwargs["virtual_hosted_style_request"] = False
        if not settings.use_ssl:
            store_kwargs["client_options"] = {"allow_http": True}

    logger.debug(
        "Creating S3 store for bucket %s (region=%s, credentials=%s)",
        settings.bucket_name,
        region,
        creds.source,
    )
    try:
        store = S3Store(settings.bucket_name, **store_kwargs)  # type: ignore[arg-type]
    except Exception as e:
        raise ConfigValidationError("bucket_name", f"cannot create S3 store: {e}") from e
    return ObstoreStorage(store, chunk_concurrency=settings.chunk_concurrency)
