from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from artifactsync.core.errors import UploaderInitError
from artifactsync.core.models import UploadRequest

from .base import FileUploader
from .config import UploaderConfig


class KeyOutsideRootError(ValueError):
    """Raised when a resolved key would land outside the target directory."""


class LocalDirectoryUploader(FileUploader):
    """Mirror artifacts into a directory tree keyed like an object store.

    ``root_dir`` (or ``endpoint`` as a fallback) names the target directory;
    the bucket, when given, becomes its first path segment.
    """

    name = "local"
    transfer_errors = (OSError, KeyOutsideRootError)

    def __init__(self, config: UploaderConfig, *, logger: logging.Logger | None = None) -> None:
        super().__init__(config, logger=logger)
        self._root: Path | None = None

    def _is_configured(self) -> bool:
        return bool(self._config.root_dir or self._config.endpoint)

    def _connect(self) -> None:
        cfg = self._config
        root = Path(cfg.root_dir or cfg.endpoint).expanduser()
        if cfg.bucket:
            root = root / cfg.bucket
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise UploaderInitError(
                f"Failed to initialize local storage at {root}: {exc}",
                details={"endpoint": str(root), "region": cfg.region, "bucket": cfg.bucket},
            ) from exc
        self._root = root.resolve()

    def target_path(self, key: str) -> Path:
        assert self._root is not None
        if not key.strip("/"):
            raise KeyOutsideRootError("resolved key is empty")
        target = (self._root / key.lstrip("/")).resolve()
        if self._root not in target.parents:
            raise KeyOutsideRootError(f"key {key} escapes storage root")
        return target

    def _transfer(self, handle: BinaryIO, key: str, request: UploadRequest) -> None:
        target = self.target_path(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        # Readers see either the previous object or the complete new one.
        fd, partial = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as out:
                shutil.copyfileobj(handle, out)
            os.replace(partial, target)
        except Exception:
            with contextlib.suppress(OSError):
                os.unlink(partial)
            raise


__all__ = ["LocalDirectoryUploader", "KeyOutsideRootError"]
