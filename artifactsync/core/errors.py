"""Custom exceptions used across artifactsync."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping


class ArtifactSyncError(Exception):
    """Base error for the application."""


class ConfigError(ArtifactSyncError):
    """Configuration related error."""


class UploaderInitError(ConfigError):
    """Raised when an uploader cannot initialise its backend client."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})


class UploadError(ArtifactSyncError):
    """Raised when an artifact upload fails."""


class NotInitializedError(UploadError):
    """Raised when ``upload`` is called on a disabled uploader."""


class LocalFileError(UploadError):
    """Local filesystem failure on the artifact path."""

    def __init__(self, message: str, *, path: str | Path) -> None:
        super().__init__(message)
        self.path = str(path)


class FileOpenError(LocalFileError):
    """The artifact could not be opened for reading."""


class FileRemoveError(LocalFileError):
    """The artifact was uploaded but could not be removed afterwards."""


class TransferError(UploadError):
    """The storage backend rejected or failed the put operation."""

    def __init__(
        self,
        message: str,
        *,
        filename: str | Path,
        key: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.filename = str(filename)
        self.key = key
        self.status_code = status_code
