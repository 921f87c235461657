"""Configuration loading for bucketload.

Settings are resolved with the following precedence (highest to lowest):
1. CLI argument
2. Environment variable (BUCKETLOAD_<KEY>)
3. Config file (``config.json`` by default; YAML is accepted too)
4. Built-in default

Usage:
    from bucketload_cli.config import load_config

    settings = load_config(Path("config.json"), overrides={"pattern": "*.csv"})
    print(settings.bucket_name, settings.max_concurrency)

Example config file:
    {
      "bucket_name": "my-bucket",
      "s3_prefix": "backups/2024",
      "local_path": "./data",
      "region": "eu-west-1",
      "pattern": "*.parquet",
      "max_concurrency": 8
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from bucketload_cli.discover import DEFAULT_PATTERN
from bucketload_cli.errors import (
    ConfigInvalidStructureError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)

DEFAULT_CONFIG_FILENAME = "config.json"
DEFAULT_REGION = "us-east-1"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_TIMEOUT_SECONDS = 24 * 60 * 60
DEFAULT_CHUNK_CONCURRENCY = 12

ENV_PREFIX = "BUCKETLOAD_"


def default_concurrency() -> int:
    """Twice the number of CPUs, which keeps network-bound workers busy."""
    return (os.cpu_count() or 1) * 2


@dataclass(frozen=True)
class UploaderConfig:
    """Validated settings for one upload run."""

    bucket_name: str
    local_path: Path
    s3_prefix: str = ""
    region: str | None = None
    aws_profile: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    endpoint: str | None = None
    use_ssl: bool = True
    pattern: str = DEFAULT_PATTERN
    max_concurrency: int = 0
    chunk_concurrency: int = DEFAULT_CHUNK_CONCURRENCY
    log_level: str = DEFAULT_LOG_LEVEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def summary(self) -> dict[str, Any]:
        """Non-secret settings, for display."""
        return {
            "bucket": self.bucket_name,
            "prefix": self.s3_prefix,
            "region": self.region or "auto",
            "source": str(self.local_path),
            "pattern": self.pattern,
            "max_concurrency": self.max_concurrency,
        }


_FIELD_TYPES: dict[str, type] = {
    "bucket_name": str,
    "local_path": str,
    "s3_prefix": str,
    "region": str,
    "aws_profile": str,
    "access_key": str,
    "secret_key": str,
    "endpoint": str,
    "use_ssl": bool,
    "pattern": str,
    "max_concurrency": int,
    "chunk_concurrency": int,
    "log_level": str,
    "timeout_seconds": float,
}

KNOWN_SETTINGS: frozenset[str] = frozenset(f.name for f in fields(UploaderConfig))


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Read the raw settings mapping from a JSON or YAML file.

    Raises:
        ConfigNotFoundError: If the file does not exist or cannot be read.
        ConfigParseError: If the file is not valid JSON/YAML.
        ConfigInvalidStructureError: If the document is not a mapping.
    """
    try:
        content = config_path.read_text()
    except OSError:
        raise ConfigNotFoundError(str(config_path)) from None

    if not content.strip():
        return {}

    # PyYAML rejects tab indentation, which is valid JSON
    if config_path.suffix.lower() == ".json" or content.lstrip().startswith("{"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(str(config_path), str(e)) from e
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigParseError(str(config_path), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigInvalidStructureError(
            str(config_path), f"expected a mapping, got {type(data).__name__}"
        )
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "bucket_name")

    Returns:
        Environment variable name (e.g., "BUCKETLOAD_BUCKET_NAME")
    """
    return f"{ENV_PREFIX}{key.upper()}"


def _env_settings() -> dict[str, str]:
    result: dict[str, str] = {}
    for key in KNOWN_SETTINGS:
        value = os.environ.get(_get_env_var_name(key))
        if value is not None:
            result[key] = value
    return result


def _coerce(key: str, value: Any, source: str) -> Any:
    """Convert a raw setting value to its declared type."""
    expected = _FIELD_TYPES[key]
    if value is None:
        return None
    if expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("1", "true", "yes", "on"):
            return True
        if isinstance(value, str) and value.lower() in ("0", "false", "no", "off"):
            return False
    elif expected is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
    elif expected is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
    elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise ConfigInvalidStructureError(
        source, f"'{key}' must be {expected.__name__}, got {type(value).__name__}"
    )


def resolve_settings(
    file_settings: dict[str, Any],
    overrides: dict[str, Any] | None = None,
    source: str = "<config>",
) -> dict[str, Any]:
    """Merge file, environment and CLI settings into one typed mapping.

    Unknown keys in the file are ignored. None-valued overrides mean
    "not given on the command line".
    """
    merged: dict[str, Any] = {}
    for layer in (file_settings, _env_settings(), overrides or {}):
        for key, value in layer.items():
            if key in KNOWN_SETTINGS and value is not None:
                merged[key] = _coerce(key, value, source)
    return merged


def validate_settings(settings: dict[str, Any]) -> UploaderConfig:
    """Apply defaults and check required settings.

    Raises:
        ConfigValidationError: If bucket_name or local_path is missing, or
            local_path is not an existing directory, or timeout_seconds or
            chunk_concurrency is given but not positive.
    """
    bucket = (settings.get("bucket_name") or "").strip()
    if not bucket:
        raise ConfigValidationError("bucket_name", "bucket_name is required in config")

    local = settings.get("local_path") or ""
    if not local:
        raise ConfigValidationError("local_path", "local_path is required in config")
    local_path = Path(local).expanduser()
    if not local_path.exists():
        raise ConfigValidationError("local_path", f"directory does not exist: {local_path}")
    if not local_path.is_dir():
        raise ConfigValidationError("local_path", f"not a directory: {local_path}")

    concurrency = settings.get("max_concurrency") or 0
    if concurrency <= 0:
        concurrency = default_concurrency()

    chunk_concurrency = settings.get("chunk_concurrency")
    if chunk_concurrency is None:
        chunk_concurrency = DEFAULT_CHUNK_CONCURRENCY
    if chunk_concurrency < 1:
        raise ConfigValidationError("chunk_concurrency", "must be at least 1")

    timeout = settings.get("timeout_seconds")
    if timeout is None:
        timeout = DEFAULT_TIMEOUT_SECONDS
    if timeout <= 0:
        raise ConfigValidationError("timeout_seconds", "must be positive")

    return UploaderConfig(
        bucket_name=bucket,
        local_path=local_path,
        s3_prefix=settings.get("s3_prefix") or "",
        region=settings.get("region") or None,
        aws_profile=settings.get("aws_profile") or None,
        access_key=settings.get("access_key") or None,
        secret_key=settings.get("secret_key") or None,
        endpoint=settings.get("endpoint") or None,
        use_ssl=settings.get("use_ssl", True),
        pattern=settings.get("pattern") or DEFAULT_PATTERN,
        max_concurrency=concurrency,
        chunk_concurrency=chunk_concurrency,
        log_level=(settings.get("log_level") or DEFAULT_LOG_LEVEL).lower(),
        timeout_seconds=timeout,
    )


def load_config(
    config_path: Path,
    overrides: dict[str, Any] | None = None,
) -> UploaderConfig:
    """Load, merge and validate settings for an upload run.

    Args:
        config_path: JSON or YAML config file.
        overrides: Values given on the command line (None entries are skipped).

    Returns:
        Validated UploaderConfig.

    Raises:
        ConfigError: On any read, parse, structure or validation problem.
    """
    file_settings = read_config_file(config_path)
    settings = resolve_settings(file_settings, overrides, source=str(config_path))
    return validate_settings(settings)
