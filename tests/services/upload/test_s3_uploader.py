from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from artifactsync.core.errors import (
    FileOpenError,
    FileRemoveError,
    NotInitializedError,
    TransferError,
    UploaderInitError,
)
from artifactsync.core.models import BrowserCaps, SessionInfo, UploadRequest
from artifactsync.services.upload.config import UploaderConfig
from artifactsync.services.upload.s3 import S3Uploader, create_s3_client


class FakeS3Client:
    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.uploads: list[dict[str, Any]] = []
        self.head_calls: list[str] = []
        self.handles: list[Any] = []

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):  # noqa: N803 - boto3 signature
        self.handles.append(fileobj)
        if self.fail_with is not None:
            raise self.fail_with
        self.uploads.append({"bucket": bucket, "key": key, "body": fileobj.read(), "extra": ExtraArgs})

    def head_bucket(self, Bucket):  # noqa: N803 - boto3 signature
        self.head_calls.append(Bucket)
        if self.fail_with is not None:
            raise self.fail_with
        return {}


def _config(**overrides: Any) -> UploaderConfig:
    values: dict[str, Any] = {
        "endpoint": "http://localhost:9000",
        "region": "us-east-1",
        "bucket": "artifacts",
        "key_pattern": "$sessionId/$fileName",
    }
    values.update(overrides)
    return UploaderConfig(**values)


def _uploader(client: FakeS3Client, **overrides: Any) -> S3Uploader:
    uploader = S3Uploader(_config(**overrides), client_factory=lambda _cfg: client)
    uploader.init()
    return uploader


def _artifact(tmp_path: Path, name: str = "Video.MP4", content: bytes = b"frames") -> Path:
    path = tmp_path / name
    path.write_bytes(content)
    return path


def _request(path: Path) -> UploadRequest:
    return UploadRequest(
        filename=path,
        session_id="ABC123",
        file_type="video",
        session=SessionInfo(caps=BrowserCaps(name="chrome", version="91", platform="LINUX"), quota="unknown"),
    )


def test_upload_streams_file_and_removes_it(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = _uploader(client)
    artifact = _artifact(tmp_path)

    key = uploader.upload(_request(artifact))

    assert key == "abc123/video.mp4"
    assert client.uploads == [{"bucket": "artifacts", "key": "abc123/video.mp4", "body": b"frames", "extra": None}]
    assert not artifact.exists()
    assert all(handle.closed for handle in client.handles)


def test_upload_keeps_file_when_configured(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = _uploader(client, keep_files=True)
    artifact = _artifact(tmp_path, content=b"original bytes")

    uploader.upload(_request(artifact))

    assert artifact.read_bytes() == b"original bytes"


def test_reduced_redundancy_sets_storage_class(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = _uploader(client, reduced_redundancy=True)

    uploader.upload(_request(_artifact(tmp_path)))

    assert client.uploads[0]["extra"] == {"StorageClass": "REDUCED_REDUNDANCY"}


def test_missing_file_never_reaches_backend(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = _uploader(client)
    missing = tmp_path / "gone.mp4"

    with pytest.raises(FileOpenError) as excinfo:
        uploader.upload(_request(missing))

    assert str(missing) in str(excinfo.value)
    assert excinfo.value.path == str(missing)
    assert client.handles == []


def test_unopenable_filename_is_file_open_error(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = _uploader(client)
    bad_name = tmp_path / "bad\x00name.mp4"

    with pytest.raises(FileOpenError) as excinfo:
        uploader.upload(_request(bad_name))

    assert excinfo.value.path == str(bad_name)
    assert client.handles == []


@pytest.mark.parametrize("keep_files", [False, True])
def test_transfer_failure_leaves_file_untouched(tmp_path: Path, keep_files: bool) -> None:
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    client = FakeS3Client(fail_with=error)
    uploader = _uploader(client, keep_files=keep_files)
    artifact = _artifact(tmp_path, content=b"keep me")

    with pytest.raises(TransferError) as excinfo:
        uploader.upload(_request(artifact))

    assert excinfo.value.key == "abc123/video.mp4"
    assert excinfo.value.filename == str(artifact)
    assert "abc123/video.mp4" in str(excinfo.value)
    assert artifact.read_bytes() == b"keep me"
    assert all(handle.closed for handle in client.handles)


def test_remove_failure_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = FakeS3Client()
    uploader = _uploader(client)
    artifact = _artifact(tmp_path)

    def deny_remove(path: str) -> None:
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr("artifactsync.services.upload.base.os.remove", deny_remove)

    with pytest.raises(FileRemoveError) as excinfo:
        uploader.upload(_request(artifact))

    assert excinfo.value.path == str(artifact)
    assert len(client.uploads) == 1
    assert all(handle.closed for handle in client.handles)


def test_upload_before_init_is_not_initialized(tmp_path: Path) -> None:
    client = FakeS3Client()
    uploader = S3Uploader(_config(), client_factory=lambda _cfg: client)
    artifact = _artifact(tmp_path)

    with pytest.raises(NotInitializedError):
        uploader.upload(_request(artifact))

    assert artifact.exists()
    assert client.handles == []


def test_init_without_endpoint_stays_disabled(tmp_path: Path) -> None:
    calls: list[UploaderConfig] = []
    uploader = S3Uploader(_config(endpoint=""), client_factory=lambda cfg: calls.append(cfg))
    uploader.init()

    assert not uploader.enabled
    assert calls == []
    with pytest.raises(NotInitializedError):
        uploader.upload(_request(_artifact(tmp_path)))


def test_init_rejects_half_credential_pair() -> None:
    uploader = S3Uploader(_config(access_key="AKIA"), client_factory=lambda _cfg: FakeS3Client())

    with pytest.raises(UploaderInitError) as excinfo:
        uploader.init()

    assert excinfo.value.details == {"endpoint": "http://localhost:9000", "region": "us-east-1", "bucket": "artifacts"}
    assert not uploader.enabled


def test_init_requires_bucket() -> None:
    uploader = S3Uploader(_config(bucket=""), client_factory=lambda _cfg: FakeS3Client())

    with pytest.raises(UploaderInitError):
        uploader.init()


def test_init_rejects_malformed_endpoint() -> None:
    uploader = S3Uploader(_config(endpoint="not a url"))

    with pytest.raises(UploaderInitError):
        uploader.init()


def test_init_probe_failure_is_init_error() -> None:
    client = FakeS3Client(fail_with=EndpointConnectionError(endpoint_url="http://localhost:9000"))
    uploader = S3Uploader(_config(verify_on_init=True), client_factory=lambda _cfg: client)

    with pytest.raises(UploaderInitError):
        uploader.init()

    assert client.head_calls == ["artifacts"]


def test_create_s3_client_uses_endpoint_and_region() -> None:
    client = create_s3_client(_config(access_key="AKIAEXAMPLE", secret_key="secret"))

    assert client.meta.endpoint_url == "http://localhost:9000"
    assert client.meta.region_name == "us-east-1"
