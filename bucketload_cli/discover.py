"""Find files under a source directory whose names match a glob pattern.

Matching is done against each file's base name with shell-glob semantics
(``*``, ``?``, ``[...]``), so ``*.parquet`` picks up parquet files at every
depth. Directories are walked but never returned. Symbolic links are not
followed: linked directories are not descended into and linked files are
skipped.

Any unreadable entry aborts the whole walk with a TraversalError; callers
never receive a partial listing.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from bucketload_cli.errors import InvalidPatternError, TraversalError

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*"


def validate_pattern(pattern: str) -> None:
    """Reject glob patterns that fnmatch would silently treat as literals.

    Raises:
        InvalidPatternError: On an unterminated ``[`` class.
    """
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            # A leading ']' is part of the class, not its end
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise InvalidPatternError(pattern, "unterminated character class")
            i = j + 1
            continue
        i += 1


def discover_files(root: Path, pattern: str | None = DEFAULT_PATTERN) -> list[Path]:
    """Return every regular file under root whose base name matches pattern.

    Args:
        root: Directory to walk recursively.
        pattern: Glob applied to base names. None or "" means match all.

    Returns:
        Sorted list of matching file paths (empty if nothing matches).

    Raises:
        InvalidPatternError: If the pattern is malformed.
        TraversalError: If any directory entry cannot be read.
    """
    pattern = pattern or DEFAULT_PATTERN
    validate_pattern(pattern)

    def _raise(err: OSError) -> None:
        raise TraversalError(str(err.filename or root), err)

    if not root.is_dir():
        _raise(NotADirectoryError(20, "Not a directory", str(root)))

    matches: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise, followlinks=False):
        for name in filenames:
            path = Path(dirpath) / name
            if path.is_symlink():
                logger.debug("Skipping symlink %s", path)
                continue
            if fnmatch.fnmatchcase(name, pattern):
                matches.append(path)

    matches.sort()
    logger.debug("Discovered %d file(s) under %s matching %r", len(matches), root, pattern)
    return matches
