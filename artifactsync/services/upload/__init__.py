"""Uploaders for artifact storage backends."""

from .base import FileUploader, IUploader, build_uploader, uploader_from_config
from .config import UploaderConfig, resolve_config
from .disabled import DisabledUploader
from .executor import ArtifactUploadExecutor, UploadOutcome
from .key_resolver import resolve_key, unknown_placeholders


__all__ = [
    "ArtifactUploadExecutor",
    "DisabledUploader",
    "FileUploader",
    "IUploader",
    "UploadOutcome",
    "UploaderConfig",
    "build_uploader",
    "resolve_config",
    "resolve_key",
    "unknown_placeholders",
    "uploader_from_config",
]
