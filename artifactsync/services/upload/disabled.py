from __future__ import annotations

from typing import Any

from artifactsync.core.errors import NotInitializedError
from artifactsync.core.models import UploadRequest

from .base import IUploader


class DisabledUploader(IUploader):
    """Stand-in used when no storage backend is configured."""

    name = "disabled"

    @property
    def enabled(self) -> bool:
        return False

    def init(self) -> None:
        return None

    def upload(self, request: UploadRequest) -> str:
        raise NotInitializedError("uploader is not initialized: no storage backend configured")

    def describe(self) -> dict[str, Any]:
        return {"backend": "disabled"}


__all__ = ["DisabledUploader"]
