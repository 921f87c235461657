"""bucketload CLI - upload a directory tree to an S3 bucket.

The CLI is a thin wrapper around the Python API (see upload.py).
All upload logic lives in the library; the CLI handles user interaction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import click

from bucketload_cli.config import DEFAULT_CONFIG_FILENAME, UploaderConfig, load_config
from bucketload_cli.credentials import check_credentials
from bucketload_cli.errors import BucketloadError, ConfigError, UploadFailedError
from bucketload_cli.json_output import ErrorDetail, error_envelope, success_envelope
from bucketload_cli.log import configure_logging
from bucketload_cli.output import detail, error, format_bytes, info, success, warn
from bucketload_cli.progress import ClickProgress, NullProgress
from bucketload_cli.storage import build_storage, store_region
from bucketload_cli.upload import PoolConfig, plan_upload, upload

# Dry runs list this many keys before summarising the rest
_DRY_RUN_PREVIEW = 10


def should_output_json(ctx: click.Context) -> bool:
    """Return True when the global --format option asked for JSON."""
    obj = ctx.find_root().obj or {}
    return obj.get("format", "text") == "json"


def output_json_envelope(envelope: Any) -> None:
    click.echo(envelope.to_json())


def _fail(
    command: str,
    exc: Exception,
    use_json: bool,
    data: dict[str, Any] | None = None,
) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    if use_json:
        output_json_envelope(
            error_envelope(command, [ErrorDetail.from_exception(exc)], data=data)
        )
    else:
        error(str(exc.message) if isinstance(exc, BucketloadError) else str(exc))
    raise SystemExit(1)


def _print_config_summary(config_path: Path, settings: UploaderConfig) -> None:
    info(f"Configuration loaded from {config_path}")
    detail(f"Bucket:  {settings.bucket_name}")
    detail(f"Prefix:  {settings.s3_prefix}")
    detail(f"Region:  {store_region(settings)}")
    detail(f"Source:  {settings.local_path}")
    detail(f"Pattern: {settings.pattern}")


def _load(
    ctx: click.Context, command: str, config_path: Path, overrides: dict[str, Any]
) -> UploaderConfig:
    try:
        return load_config(config_path, overrides)
    except ConfigError as e:
        _fail(command, e, should_output_json(ctx))


@click.group()
@click.version_option(package_name="bucketload")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.pass_context
def cli(ctx: click.Context, output_format: str) -> None:
    """bucketload - Upload a local directory tree to an S3 bucket."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    help="Path to the JSON/YAML config file.",
)


@cli.command("upload")
@config_option
@click.option("--pattern", help="Glob matched against file names (overrides config).")
@click.option("--prefix", "s3_prefix", help="Key prefix in the bucket (overrides config).")
@click.option(
    "--concurrency",
    "max_concurrency",
    type=click.IntRange(min=1),
    help="Number of files uploaded in parallel (overrides config).",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds before the whole run is abandoned (overrides config).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    help="Log level for diagnostics on stderr (overrides config).",
)
@click.option("--dry-run", is_flag=True, help="List what would be uploaded without uploading.")
@click.option("--no-progress", is_flag=True, help="Disable the progress bar.")
@click.pass_context
def upload_command(
    ctx: click.Context,
    config_path: Path,
    pattern: str | None,
    s3_prefix: str | None,
    max_concurrency: int | None,
    timeout_seconds: float | None,
    log_level: str | None,
    dry_run: bool,
    no_progress: bool,
) -> None:
    """Upload every matching file under local_path to the bucket.

    Keys keep each file's path relative to local_path, below s3_prefix.
    Existing objects with the same key are overwritten.

    Exits with status 1 if the config is invalid, the source directory
    cannot be read, any file fails, or the run times out.
    """
    use_json = should_output_json(ctx)
    overrides = {
        "pattern": pattern,
        "s3_prefix": s3_prefix,
        "max_concurrency": max_concurrency,
        "timeout_seconds": timeout_seconds,
        "log_level": log_level,
    }
    settings = _load(ctx, "upload", config_path, overrides)
    configure_logging(settings.log_level)

    if not use_json:
        _print_config_summary(config_path, settings)

    pool_config = PoolConfig.from_settings(settings)

    if dry_run:
        _dry_run(pool_config, use_json)
        return

    show_progress = not (no_progress or use_json)
    progress = ClickProgress(label="Uploading") if show_progress else NullProgress()

    try:
        storage = build_storage(settings)
        summary = upload(pool_config, storage, progress=progress)
    except UploadFailedError as e:
        failed = [{"path": str(r.path), "key": r.key, "error": str(r.error)} for r in e.failures]
        if not use_json:
            for item in failed:
                detail(f"{item['path']}: {item['error']}")
        _fail("upload", e, use_json, data={"failed_files": failed})
    except BucketloadError as e:
        _fail("upload", e, use_json)

    if use_json:
        output_json_envelope(success_envelope("upload", summary.to_dict()))
    elif summary.files_found == 0:
        info("No files to upload")
    else:
        success(
            f"Uploaded {summary.files_uploaded} file(s) "
            f"({format_bytes(summary.bytes_uploaded)}) in {summary.elapsed:.1f}s"
        )


def _dry_run(pool_config: PoolConfig, use_json: bool) -> None:
    try:
        plan = plan_upload(pool_config)
    except BucketloadError as e:
        _fail("upload", e, use_json)

    if use_json:
        data = {
            "dry_run": True,
            "files": [{"path": str(path), "key": key} for path, key in plan],
        }
        output_json_envelope(success_envelope("upload", data))
        return

    info(f"Would upload {len(plan)} file(s)", dry_run=True)
    for path, key in plan[:_DRY_RUN_PREVIEW]:
        detail(f"  {path.relative_to(pool_config.root).as_posix()} -> {key}")
    if len(plan) > _DRY_RUN_PREVIEW:
        detail(f"  ... and {len(plan) - _DRY_RUN_PREVIEW} more file(s)")


@cli.command("validate")
@config_option
@click.pass_context
def validate_command(ctx: click.Context, config_path: Path) -> None:
    """Check the config file and credentials without uploading anything."""
    use_json = should_output_json(ctx)
    settings = _load(ctx, "validate", config_path, {})

    creds_ok, hint = check_credentials(
        settings.access_key, settings.secret_key, settings.aws_profile
    )

    if use_json:
        data = {
            **settings.summary(),
            "region": store_region(settings),
            "credentials_found": creds_ok,
        }
        output_json_envelope(success_envelope("validate", data))
        return

    _print_config_summary(config_path, settings)
    if creds_ok:
        success("Config is valid and credentials were found")
    else:
        warn("Config is valid but no credentials were found")
        for line in hint.splitlines():
            detail(line)
