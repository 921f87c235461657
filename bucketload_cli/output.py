"""Styled terminal messages for the bucketload CLI.

Everything the CLI tells a person goes through these helpers so upload
reports look the same across commands. Diagnostics meant for operators go
to the logging channel instead (see log.py).

Basic Usage:
    from bucketload_cli.output import success, info, warn, error, detail

    success("Uploaded 120 files (4.2 MB)")
    info("Found 120 file(s) under ./data")
    warn("No credentials found, relying on instance metadata")
    error("Failed to upload 3 of 120 files")
    detail("data/a.csv -> backups/a.csv")

Dry-Run Mode:
    Pass dry_run=True to prefix a message with [DRY RUN] when showing what an
    upload would do:

    info("Would upload 120 file(s)", dry_run=True)
    # Output: → [DRY RUN] Would upload 120 file(s)
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",
}


def _output(
    message: str,
    style: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    if dry_run:
        message = f"[DRY RUN] {message}"

    fg_color = _STYLES[style]["fg"]
    styled_prefix = click.style(_PREFIXES[style], fg=fg_color)
    styled_message = click.style(message, fg=fg_color)
    click.echo(f"{styled_prefix} {styled_message}", file=file, nl=nl)


def success(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a success message with green checkmark (stdout)."""
    _output(message, "success", file=file, nl=nl, dry_run=dry_run)


def info(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print an info message with blue arrow (stdout)."""
    _output(message, "info", file=file, nl=nl, dry_run=dry_run)


def warn(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a warning with yellow warning symbol (stderr by default)."""
    _output(message, "warn", file=file or sys.stderr, nl=nl, dry_run=dry_run)


def error(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print an error message with red X (stderr by default)."""
    _output(message, "error", file=file or sys.stderr, nl=nl, dry_run=dry_run)


def detail(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a dimmed, indented detail line (stdout)."""
    _output(message, "detail", file=file, nl=nl, dry_run=dry_run)


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. ``1.2 MB``."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"
