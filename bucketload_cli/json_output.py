"""JSON output envelope for ``bucketload --format json``.

Envelope Structure:
    {
        "success": true|false,
        "command": "upload",
        "data": { ... },
        "errors": [ ... ]  # Only present when success=false
    }

Usage:
    from bucketload_cli.json_output import success_envelope, error_envelope, ErrorDetail

    envelope = success_envelope("upload", {"files_uploaded": 12})
    print(envelope.to_json())

    errors = [ErrorDetail(type="UploadFailedError", message="Failed to upload 2 of 12 files")]
    print(error_envelope("upload", errors).to_json())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from bucketload_cli.errors import BucketloadError


@dataclass
class ErrorDetail:
    """One entry in the errors array.

    Attributes:
        type: Error class name (e.g., "UploadFailedError")
        message: Human-readable error description
        code: Structured error code, when the error carries one
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> ErrorDetail:
        if isinstance(exc, BucketloadError):
            return cls(type=type(exc).__name__, message=exc.message, code=exc.code)
        return cls(type=type(exc).__name__, message=str(exc))

    def to_dict(self) -> dict[str, str]:
        result = {"type": self.type, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class OutputEnvelope:
    """Wrapper structure for all JSON command output."""

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary; errors is omitted when None."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }

        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]

        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Create a success envelope with the given command and data."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Create an error envelope; data defaults to an empty dict."""
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
