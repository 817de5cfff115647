from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, BinaryIO

from artifactsync.core.errors import (
    ConfigError,
    FileOpenError,
    FileRemoveError,
    NotInitializedError,
    TransferError,
)
from artifactsync.core.logger import get_logger
from artifactsync.core.models import UploadRequest

from .config import UploaderConfig
from .key_resolver import resolve_key, unknown_placeholders


class IUploader(ABC):
    """Interface for artifact storage backends."""

    @abstractmethod
    def init(self) -> None:
        """Validate configuration and set up the backend client.

        Raises:
            UploaderInitError: If the backend is configured but unusable.
        """

    @abstractmethod
    def upload(self, request: UploadRequest) -> str:
        """Upload the artifact described by ``request`` and return its key."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether ``init`` left the uploader ready to accept uploads."""


class FileUploader(IUploader):
    """Shared open, transfer and cleanup sequence for concrete backends.

    Subclasses create their client in ``_connect`` and push bytes in
    ``_transfer``. Exceptions listed in ``transfer_errors`` are reported as
    ``TransferError``.
    """

    name = "file"
    transfer_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, config: UploaderConfig, *, logger: logging.Logger | None = None) -> None:
        self._config = config
        self._logger = logger or get_logger()
        self._ready = False

    @property
    def config(self) -> UploaderConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._ready

    def describe(self) -> dict[str, Any]:
        return self._config.describe()

    def init(self) -> None:
        if not self._is_configured():
            self._logger.info("upload.%s disabled reason=not_configured", self.name)
            return
        self._connect()
        self._ready = True
        for token in unknown_placeholders(self._config.key_pattern):
            self._logger.warning(
                "upload.%s unknown_placeholder token=%s pattern=%s", self.name, token, self._config.key_pattern
            )
        details = self.describe()
        self._logger.info(
            "upload.%s initialized %s",
            self.name,
            " ".join(f"{k}={v}" for k, v in details.items() if k != "secret_key"),
        )

    def upload(self, request: UploadRequest) -> str:
        if not self._ready:
            raise NotInitializedError(f"{self.name} uploader is not initialized")
        filename = os.fspath(request.filename)
        try:
            handle = open(filename, "rb")
        except (OSError, ValueError) as exc:
            raise FileOpenError(f"failed to open file {filename}: {exc}", path=filename) from exc
        key = resolve_key(self._config.key_pattern, request)
        with handle:
            try:
                self._transfer(handle, key, request)
            except self.transfer_errors as exc:
                raise TransferError(
                    f"failed to {self.name} upload {filename} as {key}: {exc}",
                    filename=filename,
                    key=key,
                ) from exc
        if not self._config.keep_files:
            try:
                os.remove(filename)
            except OSError as exc:
                raise FileRemoveError(f"failed to remove uploaded file {filename}: {exc}", path=filename) from exc
        return key

    def _is_configured(self) -> bool:
        return bool(self._config.endpoint)

    @abstractmethod
    def _connect(self) -> None:
        """Create the backend client; raise ``UploaderInitError`` on failure."""

    @abstractmethod
    def _transfer(self, handle: BinaryIO, key: str, request: UploadRequest) -> None:
        """Stream ``handle`` to the backend under ``key``."""


def uploader_from_config(config: UploaderConfig, *, logger: logging.Logger | None = None) -> IUploader:
    backend = config.backend_name
    if not backend:
        from .disabled import DisabledUploader

        return DisabledUploader()
    if backend == "s3":
        from .s3 import S3Uploader

        return S3Uploader(config, logger=logger)
    if backend in {"local", "file", "fs"}:
        from .local import LocalDirectoryUploader

        return LocalDirectoryUploader(config, logger=logger)
    if backend in {"http", "webdav"}:
        from .http import HttpPutUploader

        return HttpPutUploader(config, logger=logger)
    raise ConfigError(f"Unknown upload backend: {backend}")


def build_uploader(config: UploaderConfig, *, logger: logging.Logger | None = None) -> IUploader:
    """Select and initialise the uploader for this process.

    Raises:
        ConfigError: For an unknown backend name.
        UploaderInitError: If the selected backend fails to initialise.
    """

    uploader = uploader_from_config(config, logger=logger)
    uploader.init()
    return uploader


__all__ = [
    "IUploader",
    "FileUploader",
    "uploader_from_config",
    "build_uploader",
]
