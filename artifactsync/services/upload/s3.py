"""S3 (and S3-compatible) storage backend."""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Callable

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from artifactsync.core.errors import UploaderInitError
from artifactsync.core.models import UploadRequest

from .base import FileUploader
from .config import REDUCED_REDUNDANCY, UploaderConfig

ClientFactory = Callable[[UploaderConfig], Any]


def create_s3_client(config: UploaderConfig) -> Any:
    """Build a boto3 S3 client for ``config``.

    Static credentials are used only when both halves of the pair are set;
    otherwise boto3 falls back to its default credential chain.
    """

    session_kwargs: dict[str, str] = {}
    if config.region:
        session_kwargs["region_name"] = config.region
    if config.has_credentials:
        session_kwargs["aws_access_key_id"] = config.access_key
        session_kwargs["aws_secret_access_key"] = config.secret_key
    session = boto3.session.Session(**session_kwargs)
    client_config = Config(connect_timeout=config.timeout_sec, read_timeout=config.timeout_sec)
    return session.client("s3", endpoint_url=config.endpoint, config=client_config)


class S3Uploader(FileUploader):
    """Upload artifacts to an S3 bucket through boto3's managed transfer."""

    name = "s3"
    transfer_errors = (BotoCoreError, ClientError, Boto3Error)

    def __init__(
        self,
        config: UploaderConfig,
        *,
        client_factory: ClientFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(config, logger=logger)
        self._client_factory = client_factory or create_s3_client
        self._client: Any = None

    def _connect(self) -> None:
        cfg = self._config
        details = {"endpoint": cfg.endpoint, "region": cfg.region, "bucket": cfg.bucket}
        if bool(cfg.access_key) != bool(cfg.secret_key):
            raise UploaderInitError(
                "Failed to initialize S3 support: access key and secret key must be set together",
                details=details,
            )
        if not cfg.bucket:
            raise UploaderInitError("Failed to initialize S3 support: bucket name is required", details=details)
        try:
            client = self._client_factory(cfg)
        except (BotoCoreError, ValueError) as exc:
            raise UploaderInitError(f"Failed to initialize S3 support: {exc}", details=details) from exc
        if cfg.verify_on_init:
            try:
                client.head_bucket(Bucket=cfg.bucket)
            except (BotoCoreError, ClientError) as exc:
                raise UploaderInitError(f"S3 bucket {cfg.bucket} is not reachable: {exc}", details=details) from exc
        self._client = client

    def _transfer(self, handle: BinaryIO, key: str, request: UploadRequest) -> None:
        extra_args = {"StorageClass": REDUCED_REDUNDANCY} if self._config.reduced_redundancy else None
        self._client.upload_fileobj(handle, self._config.bucket, key, ExtraArgs=extra_args)


__all__ = ["S3Uploader", "create_s3_client", "REDUCED_REDUNDANCY"]
