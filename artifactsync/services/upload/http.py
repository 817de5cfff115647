"""Plain HTTP PUT backend for WebDAV-style artifact stores."""

from __future__ import annotations

import logging
import mimetypes
from typing import BinaryIO
from urllib.parse import quote, urlsplit

import requests
from requests.exceptions import RequestException

from artifactsync import __version__
from artifactsync.core.errors import TransferError, UploaderInitError
from artifactsync.core.models import UploadRequest

from .base import FileUploader
from .config import REDUCED_REDUNDANCY, UploaderConfig

USER_AGENT = f"artifactsync/{__version__}"
STORAGE_CLASS_HEADER = "x-amz-storage-class"
EXPECTED_STATUS = (200, 201, 204)


def detect_mime_type(path: str) -> str:
    """Best-effort MIME type detection."""

    mime, _ = mimetypes.guess_type(path)
    return mime or "application/octet-stream"


class HttpPutUploader(FileUploader):
    """PUT each artifact to ``{endpoint}/{bucket}/{key}``."""

    name = "http"
    transfer_errors = (RequestException,)

    def __init__(
        self,
        config: UploaderConfig,
        *,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(config, logger=logger)
        self._session = session
        self._base_url = ""

    def _connect(self) -> None:
        cfg = self._config
        details = {"endpoint": cfg.endpoint, "region": cfg.region, "bucket": cfg.bucket}
        parts = urlsplit(cfg.endpoint)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise UploaderInitError(f"Invalid HTTP upload endpoint: {cfg.endpoint}", details=details)
        if bool(cfg.access_key) != bool(cfg.secret_key):
            raise UploaderInitError("access key and secret key must be set together", details=details)
        session = self._session or requests.Session()
        session.verify = cfg.verify_tls
        session.headers.setdefault("User-Agent", USER_AGENT)
        if cfg.has_credentials:
            session.auth = (cfg.access_key, cfg.secret_key)
        base = cfg.endpoint.rstrip("/")
        if cfg.bucket:
            base = f"{base}/{quote(cfg.bucket, safe='')}"
        if cfg.verify_on_init:
            try:
                session.head(base, timeout=cfg.timeout_sec)
            except RequestException as exc:
                raise UploaderInitError(f"HTTP upload endpoint is not reachable: {exc}", details=details) from exc
        self._session = session
        self._base_url = base

    def object_url(self, key: str) -> str:
        return f"{self._base_url}/{quote(key.lstrip('/'), safe='/')}"

    def _transfer(self, handle: BinaryIO, key: str, request: UploadRequest) -> None:
        assert self._session is not None
        headers = {"Content-Type": detect_mime_type(str(request.filename))}
        if self._config.reduced_redundancy:
            headers[STORAGE_CLASS_HEADER] = REDUCED_REDUNDANCY
        response = self._session.put(
            self.object_url(key),
            data=handle,
            headers=headers,
            timeout=self._config.timeout_sec,
        )
        if response.status_code not in EXPECTED_STATUS:
            raise TransferError(
                f"failed to http upload {request.filename} as {key}: HTTP {response.status_code}",
                filename=request.filename,
                key=key,
                status_code=response.status_code,
            )


__all__ = ["HttpPutUploader", "detect_mime_type"]
