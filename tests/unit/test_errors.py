"""Unit tests for bucketload error classes.

Tests cover:
- Base BucketloadError behavior
- Error codes format (BKLD-{category}{number})
- Error to_dict serialization
- Specific error types for each category
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from bucketload_cli.errors import (
    BucketloadError,
    ConfigError,
    ConfigInvalidStructureError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    DiscoveryError,
    InvalidKeyError,
    InvalidPatternError,
    StorageError,
    StorageErrorKind,
    TraversalError,
    UploadError,
    UploadFailedError,
    UploadTimeoutError,
)
from bucketload_cli.pool import FileResult

ALL_ERRORS = [
    ConfigNotFoundError("config.json"),
    ConfigParseError("config.json", "bad indent"),
    ConfigInvalidStructureError("config.json", "expected a mapping"),
    ConfigValidationError("bucket_name", "bucket_name is required"),
    InvalidPatternError("[abc", "unterminated character class"),
    TraversalError("/data/locked", PermissionError(13, "Permission denied")),
    InvalidKeyError("/data/x", "contains control characters"),
    StorageError("a.txt", StorageErrorKind.AUTH, "403"),
    UploadFailedError(2, 10),
    UploadTimeoutError(30.0, 4, 10),
]


class TestBucketloadError:
    """Tests for base BucketloadError class."""

    @pytest.mark.unit
    def test_error_has_code_and_message(self) -> None:
        error = BucketloadError("Test error message")

        assert error.code == "BKLD-000"
        assert error.message == "Test error message"

    @pytest.mark.unit
    def test_str_includes_code(self) -> None:
        assert str(BucketloadError("boom")) == "[BKLD-000] boom"

    @pytest.mark.unit
    def test_context_becomes_attributes(self) -> None:
        error = BucketloadError("msg", path="/x", count=3)

        assert error.path == "/x"  # type: ignore[attr-defined]
        assert error.count == 3  # type: ignore[attr-defined]
        assert error.context == {"path": "/x", "count": 3}

    @pytest.mark.unit
    def test_reserved_context_keys_do_not_clobber(self) -> None:
        error = BucketloadError("real message", code="FAKE", context="x")

        assert error.code == "BKLD-000"
        assert error.message == "real message"
        assert error.context == {"code": "FAKE", "context": "x"}

    @pytest.mark.unit
    def test_to_dict(self) -> None:
        error = ConfigNotFoundError("missing.json")

        assert error.to_dict() == {
            "code": "BKLD-CFG001",
            "message": "Config file not found: missing.json",
            "context": {"path": "missing.json"},
        }


class TestErrorCodes:
    """Every error carries a well-formed, unique code."""

    @pytest.mark.unit
    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_code_format(self, error: BucketloadError) -> None:
        assert re.fullmatch(r"BKLD-[A-Z]{3}\d{3}", error.code)

    @pytest.mark.unit
    def test_codes_unique(self) -> None:
        codes = [e.code for e in ALL_ERRORS]

        assert len(codes) == len(set(codes))

    @pytest.mark.unit
    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_to_dict_is_json_serializable(self, error: BucketloadError) -> None:
        json.dumps(error.to_dict())


class TestCategories:
    """Errors sit under their category base classes."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("error_cls", "base"),
        [
            (ConfigNotFoundError, ConfigError),
            (ConfigParseError, ConfigError),
            (ConfigInvalidStructureError, ConfigError),
            (ConfigValidationError, ConfigError),
            (InvalidPatternError, DiscoveryError),
            (TraversalError, DiscoveryError),
            (UploadFailedError, UploadError),
            (UploadTimeoutError, UploadError),
            (InvalidKeyError, BucketloadError),
            (StorageError, BucketloadError),
        ],
    )
    def test_hierarchy(self, error_cls: type, base: type) -> None:
        assert issubclass(error_cls, base)


class TestSpecificErrors:
    """Messages and attributes of individual errors."""

    @pytest.mark.unit
    def test_traversal_error_keeps_original(self) -> None:
        original = PermissionError(13, "Permission denied")

        error = TraversalError("/data/locked", original)

        assert error.original_exception is original
        assert "Permission denied" in error.message
        assert error.context["original_error_type"] == "PermissionError"

    @pytest.mark.unit
    def test_storage_error_kind(self) -> None:
        error = StorageError("a/b.txt", StorageErrorKind.REGION_MISMATCH, "PermanentRedirect")

        assert error.kind is StorageErrorKind.REGION_MISMATCH  # type: ignore[attr-defined]
        assert "region-mismatch" in error.message
        assert json.loads(json.dumps(error.to_dict()))["context"]["kind"] == "region-mismatch"

    @pytest.mark.unit
    def test_upload_failed_error_counts(self, tmp_path: Path) -> None:
        failure = FileResult(tmp_path / "a", "a", error=OSError("x"))

        error = UploadFailedError(1, 3, [failure])

        assert error.message == "Failed to upload 1 of 3 files"
        assert error.failed == 1  # type: ignore[attr-defined]
        assert error.total == 3  # type: ignore[attr-defined]
        assert error.failures == [failure]
        assert "failures" not in error.to_dict()["context"]

    @pytest.mark.unit
    def test_upload_failed_error_defaults_to_no_failures(self) -> None:
        assert UploadFailedError(0, 0).failures == []

    @pytest.mark.unit
    def test_timeout_message(self) -> None:
        error = UploadTimeoutError(0.5, 2, 7)

        assert error.message == "Upload deadline of 0.5s exceeded after 2 of 7 files"
