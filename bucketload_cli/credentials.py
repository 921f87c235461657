"""Resolve S3 credentials for an upload run.

Resolution order (first complete pair wins):
1. ``access_key`` + ``secret_key`` from the config file
2. ``aws_profile`` from ``~/.aws/credentials`` (region from ``~/.aws/config``)
3. ``AWS_ACCESS_KEY_ID`` / ``AWS_SECRET_ACCESS_KEY`` environment variables
4. The ``default`` profile in ``~/.aws/credentials``

When nothing is found the store is built without explicit keys and obstore
falls back to its own discovery (instance metadata, web identity, ...).
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Credentials:
    """Resolved access keys and where they came from."""

    access_key_id: str | None
    secret_access_key: str | None
    source: str
    profile_region: str | None = None

    @property
    def complete(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


def _read_section(path: Path, name: str) -> dict[str, str]:
    """Return one section of an AWS ini file, or {} if absent."""
    if not path.exists():
        return {}
    parser = configparser.ConfigParser()
    parser.read(path)
    if parser.has_section(name):
        return dict(parser[name])
    if name == "default":
        return dict(parser.defaults())
    return {}


def load_profile(profile: str = "default") -> Credentials:
    """Read a named profile from ~/.aws/credentials and ~/.aws/config.

    Keys come from the credentials file; the region comes from the config
    file, where non-default profiles live under ``[profile <name>]``. Either
    key may be missing, so check ``complete`` before using the result.
    """
    aws_dir = Path.home() / ".aws"
    keys = _read_section(aws_dir / "credentials", profile)
    config_name = profile if profile == "default" else f"profile {profile}"
    settings = _read_section(aws_dir / "config", config_name)
    return Credentials(
        keys.get("aws_access_key_id"),
        keys.get("aws_secret_access_key"),
        source=f"profile:{profile}",
        profile_region=settings.get("region"),
    )


def resolve_credentials(
    access_key: str | None = None,
    secret_key: str | None = None,
    profile: str | None = None,
) -> Credentials:
    """Walk the resolution chain and return the first complete key pair."""
    if access_key and secret_key:
        return Credentials(access_key, secret_key, source="config")

    if profile:
        # A named profile is explicit; don't silently fall through to other keys
        return load_profile(profile)

    key_id = os.environ.get("AWS_ACCESS_KEY_ID")
    secret = os.environ.get("AWS_SECRET_ACCESS_KEY")
    if key_id and secret:
        return Credentials(key_id, secret, source="environment")

    default = load_profile("default")
    if default.complete:
        return default
    return Credentials(None, None, source="none", profile_region=default.profile_region)


def check_credentials(
    access_key: str | None = None,
    secret_key: str | None = None,
    profile: str | None = None,
) -> tuple[bool, str]:
    """Check if credentials are available.

    Returns:
        Tuple of (credentials_found, hint_message)
    """
    creds = resolve_credentials(access_key, secret_key, profile)
    if creds.complete:
        return True, ""

    hints = []
    if profile:
        hints.append(f"AWS profile '{profile}' not found or incomplete.")
        hints.append("")
        hints.append("Ensure your ~/.aws/credentials file has this profile:")
        hints.append(f"  [{profile}]")
        hints.append("  aws_access_key_id = YOUR_ACCESS_KEY")
        hints.append("  aws_secret_access_key = YOUR_SECRET_KEY")
        return False, "\n".join(hints)

    hints.append("S3 credentials not found. To configure credentials:")
    hints.append("")
    hints.append("Option 1: Set access_key and secret_key in the config file")
    hints.append("")
    hints.append("Option 2: Set aws_profile in the config file")
    hints.append("")
    hints.append("Option 3: Set environment variables")
    hints.append("  export AWS_ACCESS_KEY_ID=your_access_key")
    hints.append("  export AWS_SECRET_ACCESS_KEY=your_secret_key")
    return False, "\n".join(hints)
