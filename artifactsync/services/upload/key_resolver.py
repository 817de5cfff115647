"""Object key derivation from key-pattern templates."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

from artifactsync.core.models import UploadRequest

DEFAULT_KEY_PATTERN = "$fileName"

_TOKEN_RE = re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*")


def _file_name(request: UploadRequest) -> str:
    return Path(request.filename).name


def _file_extension(request: UploadRequest) -> str:
    name = _file_name(request)
    idx = name.rfind(".")
    return name[idx:] if idx >= 0 else ""


# Substitution order matters: values are applied one after another.
PLACEHOLDERS: tuple[tuple[str, Callable[[UploadRequest], str]], ...] = (
    ("$fileName", _file_name),
    ("$fileExtension", _file_extension),
    ("$browserName", lambda r: r.session.caps.name),
    ("$browserVersion", lambda r: r.session.caps.version),
    ("$platformName", lambda r: r.session.caps.platform),
    ("$quota", lambda r: r.session.quota),
    ("$sessionId", lambda r: r.session_id),
    ("$fileType", lambda r: r.file_type),
)


def resolve_key(pattern: str, request: UploadRequest) -> str:
    """Expand ``pattern`` against ``request`` into an object key.

    Every recognised placeholder is replaced literally by its lower-cased
    value, then spaces become hyphens. Unknown ``$tokens`` are kept as is.
    """

    key = pattern
    for token, getter in PLACEHOLDERS:
        if token in key:
            key = key.replace(token, (getter(request) or "").lower())
    return key.replace(" ", "-")


def unknown_placeholders(pattern: str) -> list[str]:
    """Return ``$tokens`` in ``pattern`` that ``resolve_key`` leaves untouched."""

    stripped = pattern
    for token, _ in PLACEHOLDERS:
        stripped = stripped.replace(token, "")
    seen: list[str] = []
    for match in _TOKEN_RE.findall(stripped):
        if match not in seen:
            seen.append(match)
    return seen


__all__ = [
    "DEFAULT_KEY_PATTERN",
    "PLACEHOLDERS",
    "resolve_key",
    "unknown_placeholders",
]
