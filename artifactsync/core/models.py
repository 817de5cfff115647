"""Request models shared between artifact producers and uploaders."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class BrowserCaps:
    """Browser capabilities negotiated for an automation session."""

    name: str = ""
    version: str = ""
    platform: str = ""


@dataclass(frozen=True, slots=True)
class SessionInfo:
    """Session metadata used for naming uploaded artifacts."""

    caps: BrowserCaps = field(default_factory=BrowserCaps)
    quota: str = ""


@dataclass(frozen=True, slots=True)
class UploadRequest:
    """A finished local artifact waiting to be uploaded.

    Attributes:
        filename: Local path of the artifact. Must be readable when uploaded.
        session_id: Identifier of the session that produced the artifact.
        file_type: Logical artifact category such as ``video`` or ``log``.
        session: Metadata of the producing session.
    """

    filename: str | Path
    session_id: str = ""
    file_type: str = ""
    session: SessionInfo = field(default_factory=SessionInfo)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UploadRequest":
        """Build a request from a producer payload.

        Both snake_case keys and the camelCase keys used on the wire
        (``sessionId``, ``type``, ``caps.browserName``...) are accepted.
        """

        filename = data.get("filename") or data.get("fileName")
        if not filename:
            raise ValueError("Upload request payload is missing 'filename'")
        session_raw = data.get("session") or {}
        if not isinstance(session_raw, Mapping):
            raise ValueError("Upload request 'session' must be a mapping")
        caps_raw = session_raw.get("caps") or {}
        if not isinstance(caps_raw, Mapping):
            raise ValueError("Upload request 'session.caps' must be a mapping")
        caps = BrowserCaps(
            name=_text(caps_raw, "name", "browserName"),
            version=_text(caps_raw, "version", "browserVersion"),
            platform=_text(caps_raw, "platform", "platformName"),
        )
        return cls(
            filename=filename,
            session_id=_text(data, "session_id", "sessionId"),
            file_type=_text(data, "file_type", "type"),
            session=SessionInfo(caps=caps, quota=_text(session_raw, "quota")),
        )


def _text(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return str(value)
    return ""


__all__ = [
    "BrowserCaps",
    "SessionInfo",
    "UploadRequest",
]
