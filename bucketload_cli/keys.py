"""Map local file paths to object keys."""

from __future__ import annotations

import re
from pathlib import Path

from bucketload_cli.errors import InvalidKeyError

# C0 controls and DEL are rejected by most object stores
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def derive_key(root: Path, prefix: str, file_path: Path) -> str:
    """Build the object key for a file, preserving its path below root.

    Args:
        root: Source directory the upload is rooted at.
        prefix: Key prefix; surrounding slashes are ignored.
        file_path: File under root.

    Returns:
        Key using forward slashes, e.g. ``prefix/sub/dir/file.txt``.

    Raises:
        InvalidKeyError: If file_path is not under root, or the resulting
            key contains control characters or is not valid UTF-8.
    """
    try:
        rel_path = file_path.relative_to(root)
    except ValueError:
        raise InvalidKeyError(str(file_path), f"not under {root}") from None

    # Always use POSIX separators for object store keys (forward slashes)
    rel_posix = rel_path.as_posix()
    if rel_posix in ("", "."):
        raise InvalidKeyError(str(file_path), "path is the source directory itself")

    prefix = prefix.strip("/")
    key = f"{prefix}/{rel_posix}" if prefix else rel_posix

    if _CONTROL_CHARS.search(key):
        raise InvalidKeyError(str(file_path), "contains control characters")
    try:
        key.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidKeyError(str(file_path), "name is not valid UTF-8") from None

    return key
