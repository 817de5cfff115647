"""Typer based command line entry points for artifactsync."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from artifactsync.core.errors import ConfigError, NotInitializedError, UploadError, UploaderInitError
from artifactsync.core.logger import get_logger, set_level
from artifactsync.core.models import BrowserCaps, SessionInfo, UploadRequest
from artifactsync.services.upload import (
    IUploader,
    UploaderConfig,
    build_uploader,
    resolve_config,
    resolve_key,
    unknown_placeholders,
)

app = typer.Typer(help="Upload finished session artifacts to object storage.")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    try:
        set_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _build_request(
    file: str | Path,
    session_id: str,
    file_type: str,
    browser_name: str,
    browser_version: str,
    platform_name: str,
    quota: str,
) -> UploadRequest:
    return UploadRequest(
        filename=file,
        session_id=session_id,
        file_type=file_type,
        session=SessionInfo(
            caps=BrowserCaps(name=browser_name, version=browser_version, platform=platform_name),
            quota=quota,
        ),
    )


def _load_config(profile: Optional[str], config_path: Optional[Path], overrides: dict[str, Any]) -> UploaderConfig:
    try:
        return resolve_config(profile, config_path=config_path, overrides=overrides)
    except ConfigError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


def _build(config: UploaderConfig) -> IUploader:
    try:
        return build_uploader(config)
    except UploaderInitError as exc:
        get_logger().error(
            "upload.init failed error=%s %s",
            exc,
            " ".join(f"{k}={v}" for k, v in exc.details.items()),
        )
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    except ConfigError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


@app.command("upload")
def cmd_upload(
    file: Path = typer.Argument(..., dir_okay=False, help="Finished artifact to upload"),
    session_id: str = typer.Option("", "--session-id", help="Session identifier"),
    file_type: str = typer.Option("", "--type", help="Artifact type such as video, log or download"),
    browser_name: str = typer.Option("", "--browser-name", help="Browser name"),
    browser_version: str = typer.Option("", "--browser-version", help="Browser version"),
    platform_name: str = typer.Option("", "--platform-name", help="Platform name"),
    quota: str = typer.Option("", "--quota", help="Quota name"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Uploader profile name in profiles.yaml"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Profiles file path"),
    backend: Optional[str] = typer.Option(None, "--backend", help="Storage backend: s3, local or http"),
    endpoint: Optional[str] = typer.Option(None, "--s3-endpoint", help="S3 endpoint URL"),
    region: Optional[str] = typer.Option(None, "--s3-region", help="S3 region"),
    access_key: Optional[str] = typer.Option(None, "--s3-access-key", help="S3 access key"),
    secret_key: Optional[str] = typer.Option(None, "--s3-secret-key", help="S3 secret key"),
    bucket: Optional[str] = typer.Option(None, "--s3-bucket-name", help="S3 bucket name"),
    key_pattern: Optional[str] = typer.Option(None, "--s3-key-pattern", help="S3 object key pattern"),
    reduced_redundancy: Optional[bool] = typer.Option(
        None, "--s3-reduced-redundancy/--no-s3-reduced-redundancy", help="Use reduced redundancy storage class"
    ),
    keep_files: Optional[bool] = typer.Option(
        None, "--s3-keep-files/--no-s3-keep-files", help="Do not remove uploaded files"
    ),
    root_dir: Optional[str] = typer.Option(None, "--root-dir", help="Target directory for the local backend"),
) -> None:
    """Upload one finished artifact and print its object key."""

    config = _load_config(
        profile,
        config_path,
        {
            "backend": backend,
            "endpoint": endpoint,
            "region": region,
            "access_key": access_key,
            "secret_key": secret_key,
            "bucket": bucket,
            "key_pattern": key_pattern,
            "reduced_redundancy": reduced_redundancy,
            "keep_files": keep_files,
            "root_dir": root_dir,
        },
    )
    uploader = _build(config)

    request = _build_request(file, session_id, file_type, browser_name, browser_version, platform_name, quota)
    try:
        key = uploader.upload(request)
    except NotInitializedError:
        typer.echo("Upload backend not configured; nothing uploaded.")
        return
    except UploadError as exc:
        get_logger().error("upload failed file=%s error=%s", file, exc)
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(key)


@app.command("resolve-key")
def cmd_resolve_key(
    pattern: str = typer.Argument(..., help="Key pattern, e.g. '$sessionId/$fileName'"),
    file: str = typer.Option("", "--file", help="Artifact file name or path"),
    session_id: str = typer.Option("", "--session-id", help="Session identifier"),
    file_type: str = typer.Option("", "--type", help="Artifact type"),
    browser_name: str = typer.Option("", "--browser-name", help="Browser name"),
    browser_version: str = typer.Option("", "--browser-version", help="Browser version"),
    platform_name: str = typer.Option("", "--platform-name", help="Platform name"),
    quota: str = typer.Option("", "--quota", help="Quota name"),
) -> None:
    """Print the object key a pattern expands to, without uploading."""

    for token in unknown_placeholders(pattern):
        typer.secho(f"Warning: unknown placeholder {token} left as is", fg=typer.colors.YELLOW, err=True)
    request = _build_request(file, session_id, file_type, browser_name, browser_version, platform_name, quota)
    typer.echo(resolve_key(pattern, request))


@app.command("check")
def cmd_check(
    profile: Optional[str] = typer.Option(None, "--profile", help="Uploader profile name in profiles.yaml"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Profiles file path"),
    verify: bool = typer.Option(False, "--verify", help="Probe the backend while initialising"),
) -> None:
    """Initialise the configured uploader and print its settings."""

    config = _load_config(profile, config_path, {"verify_on_init": True if verify else None})
    uploader = _build(config)
    for name, value in config.describe().items():
        typer.echo(f"{name:20} {value}")
    typer.echo(f"{'status':20} {'ready' if uploader.enabled else 'disabled'}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
