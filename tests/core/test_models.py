from __future__ import annotations

import pytest

from artifactsync.core.models import BrowserCaps, SessionInfo, UploadRequest


def test_from_mapping_accepts_wire_keys() -> None:
    request = UploadRequest.from_mapping(
        {
            "filename": "/tmp/video.mp4",
            "sessionId": "abc",
            "type": "video",
            "session": {
                "caps": {"browserName": "firefox", "browserVersion": 115, "platformName": "LINUX"},
                "quota": "ci",
            },
        }
    )

    assert request == UploadRequest(
        filename="/tmp/video.mp4",
        session_id="abc",
        file_type="video",
        session=SessionInfo(caps=BrowserCaps(name="firefox", version="115", platform="LINUX"), quota="ci"),
    )


def test_from_mapping_defaults_missing_metadata() -> None:
    request = UploadRequest.from_mapping({"filename": "log.txt"})

    assert request.session_id == ""
    assert request.session == SessionInfo()


def test_from_mapping_requires_filename() -> None:
    with pytest.raises(ValueError):
        UploadRequest.from_mapping({"sessionId": "abc"})
