from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from requests.exceptions import ConnectionError

from artifactsync.core.errors import TransferError, UploaderInitError
from artifactsync.core.models import UploadRequest
from artifactsync.services.upload.config import UploaderConfig
from artifactsync.services.upload.http import HttpPutUploader


@dataclass
class MockResponse:
    status_code: int = 201


@dataclass
class FakeSession:
    responses: list[Any] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    verify: bool = True
    auth: Any = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    def put(self, url: str, **kwargs: Any) -> MockResponse:
        kwargs["body"] = kwargs["data"].read()
        self.calls.append({"url": url, **kwargs})
        action = self.responses.pop(0) if self.responses else MockResponse()
        if isinstance(action, Exception):
            raise action
        return action

    def head(self, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append({"url": url, "method": "HEAD"})
        return MockResponse(200)


def _uploader(session: FakeSession, **overrides: Any) -> HttpPutUploader:
    values: dict[str, Any] = {
        "backend": "http",
        "endpoint": "https://store.example.com/dav/",
        "bucket": "runs",
        "key_pattern": "$sessionId/$fileName",
    }
    values.update(overrides)
    uploader = HttpPutUploader(UploaderConfig(**values), session=session)  # type: ignore[arg-type]
    uploader.init()
    return uploader


def _artifact(tmp_path: Path) -> Path:
    path = tmp_path / "capture.mp4"
    path.write_bytes(b"movie")
    return path


def test_put_to_object_url(tmp_path: Path) -> None:
    session = FakeSession()
    uploader = _uploader(session, access_key="user", secret_key="pass", reduced_redundancy=True)
    artifact = _artifact(tmp_path)

    key = uploader.upload(UploadRequest(filename=artifact, session_id="S1"))

    call = session.calls[0]
    assert key == "s1/capture.mp4"
    assert call["url"] == "https://store.example.com/dav/runs/s1/capture.mp4"
    assert call["body"] == b"movie"
    assert call["headers"]["Content-Type"] == "video/mp4"
    assert call["headers"]["x-amz-storage-class"] == "REDUCED_REDUNDANCY"
    assert session.auth == ("user", "pass")
    assert not artifact.exists()


def test_error_status_is_transfer_error(tmp_path: Path) -> None:
    session = FakeSession(responses=[MockResponse(403)])
    uploader = _uploader(session)
    artifact = _artifact(tmp_path)

    with pytest.raises(TransferError) as excinfo:
        uploader.upload(UploadRequest(filename=artifact, session_id="S1"))

    assert excinfo.value.status_code == 403
    assert excinfo.value.key == "s1/capture.mp4"
    assert artifact.exists()


def test_connection_error_is_transfer_error(tmp_path: Path) -> None:
    session = FakeSession(responses=[ConnectionError("refused")])
    uploader = _uploader(session, keep_files=True)
    artifact = _artifact(tmp_path)

    with pytest.raises(TransferError):
        uploader.upload(UploadRequest(filename=artifact, session_id="S1"))

    assert artifact.read_bytes() == b"movie"


def test_invalid_endpoint_is_init_error() -> None:
    with pytest.raises(UploaderInitError):
        _uploader(FakeSession(), endpoint="ftp://store.example.com")


def test_object_url_without_bucket(tmp_path: Path) -> None:
    uploader = _uploader(FakeSession(), bucket="")

    assert uploader.object_url("a b/c.txt") == "https://store.example.com/dav/a%20b/c.txt"
