"""Batch upload executor applying caller-side failure policy and reporting."""

from __future__ import annotations

import logging
import os
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Literal, Sequence

from artifactsync.core.errors import NotInitializedError, UploadError
from artifactsync.core.logger import get_logger
from artifactsync.core.models import UploadRequest

from .base import IUploader

OutcomeStatus = Literal["uploaded", "skipped", "failed"]


@dataclass(slots=True)
class UploadOutcome:
    """Result of uploading a single artifact."""

    filename: str
    status: OutcomeStatus
    key: str | None = None
    reason: str | None = None


class ArtifactUploadExecutor:
    """Run uploads for finished artifacts without letting failures escape.

    A disabled uploader is treated as "nothing to do" rather than an
    error. Failed uploads are logged and reported, never retried.
    """

    def __init__(
        self,
        uploader: IUploader,
        *,
        max_workers: int = 4,
        logger: logging.Logger | None = None,
    ) -> None:
        self.uploader = uploader
        self.max_workers = max(1, max_workers)
        self.logger = logger or get_logger()

    def upload_one(self, request: UploadRequest) -> UploadOutcome:
        filename = os.fspath(request.filename)
        try:
            key = self.uploader.upload(request)
        except NotInitializedError as exc:
            self.logger.debug("upload.executor skipped file=%s reason=%s", filename, exc)
            return UploadOutcome(filename=filename, status="skipped", reason=str(exc))
        except UploadError as exc:
            self.logger.error(
                "upload.executor failed session=%s type=%s file=%s error=%s",
                request.session_id,
                request.file_type,
                filename,
                exc,
            )
            return UploadOutcome(filename=filename, status="failed", reason=str(exc))
        self.logger.info(
            "upload.executor uploaded session=%s type=%s file=%s key=%s",
            request.session_id,
            request.file_type,
            filename,
            key,
        )
        return UploadOutcome(filename=filename, status="uploaded", key=key)

    def run_batch(
        self,
        requests: Sequence[UploadRequest],
        *,
        batch_id: str | None = None,
    ) -> dict[str, object]:
        start = time.monotonic()
        batch_key = batch_id or uuid.uuid4().hex
        outcomes: list[UploadOutcome] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="artifact-upload") as pool:
            futures: list[Future[UploadOutcome]] = [pool.submit(self.upload_one, request) for request in requests]
            for future in as_completed(futures):
                outcomes.append(future.result())

        outcomes.sort(key=lambda item: item.filename)
        duration = time.monotonic() - start
        report: dict[str, object] = {
            "batchId": batch_key,
            "total": len(requests),
            "uploaded": [{"file": o.filename, "key": o.key} for o in outcomes if o.status == "uploaded"],
            "skipped": [o.filename for o in outcomes if o.status == "skipped"],
            "failed": [{"file": o.filename, "reason": o.reason} for o in outcomes if o.status == "failed"],
            "duration": round(duration, 3),
        }
        self.logger.info(
            "upload.executor batch_done batch=%s total=%s uploaded=%s skipped=%s failed=%s",
            batch_key,
            report["total"],
            len(report["uploaded"]),  # type: ignore[arg-type]
            len(report["skipped"]),  # type: ignore[arg-type]
            len(report["failed"]),  # type: ignore[arg-type]
        )
        return report


__all__ = [
    "ArtifactUploadExecutor",
    "UploadOutcome",
]
