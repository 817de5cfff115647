"""Configuration loader for artifact uploaders."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from artifactsync.core.errors import ConfigError
from artifactsync.core.logger import get_logger
from artifactsync.core.profiles import resolve_config_path

from .key_resolver import DEFAULT_KEY_PATTERN

DEFAULT_TIMEOUT = 60.0
REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
DEFAULT_PROFILES_FILE = "profiles.yaml"
PROFILES_SECTION = "uploader"

DISABLED_BACKENDS = {"", "none", "disabled", "noop"}

BACKEND_ENV = "ARTIFACTSYNC_BACKEND"
ENDPOINT_ENV = "ARTIFACTSYNC_ENDPOINT"
REGION_ENV = "ARTIFACTSYNC_REGION"
ACCESS_KEY_ENV = "ARTIFACTSYNC_ACCESS_KEY"
SECRET_KEY_ENV = "ARTIFACTSYNC_SECRET_KEY"
BUCKET_ENV = "ARTIFACTSYNC_BUCKET"
KEY_PATTERN_ENV = "ARTIFACTSYNC_KEY_PATTERN"
REDUCED_REDUNDANCY_ENV = "ARTIFACTSYNC_REDUCED_REDUNDANCY"
KEEP_FILES_ENV = "ARTIFACTSYNC_KEEP_FILES"
ROOT_DIR_ENV = "ARTIFACTSYNC_ROOT_DIR"
TIMEOUT_ENV = "ARTIFACTSYNC_TIMEOUT_SEC"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True, slots=True)
class UploaderConfig:
    """Resolved, immutable uploader settings.

    An empty ``backend`` with a non-empty ``endpoint`` selects S3. With
    neither set the uploader is disabled.
    """

    backend: str = ""
    endpoint: str = ""
    region: str = ""
    access_key: str = ""
    secret_key: str = ""
    bucket: str = ""
    key_pattern: str = DEFAULT_KEY_PATTERN
    reduced_redundancy: bool = False
    keep_files: bool = False
    root_dir: str = ""
    timeout_sec: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    verify_on_init: bool = False

    @property
    def backend_name(self) -> str:
        """Return the effective backend name, ``""`` when disabled."""

        name = self.backend.strip().lower()
        if name in DISABLED_BACKENDS:
            return "s3" if self.endpoint else ""
        return name

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)

    def describe(self) -> dict[str, Any]:
        """Return a loggable view with the secret masked."""

        return {
            "backend": self.backend_name or "disabled",
            "endpoint": self.endpoint,
            "region": self.region,
            "bucket": self.bucket,
            "access_key": self.access_key,
            "secret_key": "***" if self.secret_key else "",
            "key_pattern": self.key_pattern,
            "reduced_redundancy": self.reduced_redundancy,
            "keep_files": self.keep_files,
            "root_dir": self.root_dir,
        }

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "UploaderConfig":
        """Create a configuration instance from profiles.yaml.

        Args:
            profile_name: Profile name under the ``uploader`` section.
            config_path: Optional override for the config file path.

        Returns:
            Parsed ``UploaderConfig`` instance.

        Raises:
            ConfigError: If the profile cannot be loaded or is invalid.
        """

        raw = _load_profiles_file(path=config_path).get(profile_name)
        if raw is None:
            raise ConfigError(f"uploader profile '{profile_name}' not found in {config_path or DEFAULT_PROFILES_FILE}")
        return cls.from_mapping(raw)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UploaderConfig":
        """Create a configuration instance from a mapping."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown uploader config keys: {', '.join(unknown)}")
        return cls(
            backend=_as_text(_expand_env(data.get("backend", ""))),
            endpoint=_as_text(_expand_env(data.get("endpoint", ""))),
            region=_as_text(_expand_env(data.get("region", ""))),
            access_key=_as_text(_expand_env(data.get("access_key", ""))),
            secret_key=_as_text(_expand_env(data.get("secret_key", ""))),
            bucket=_as_text(_expand_env(data.get("bucket", ""))),
            key_pattern=_as_pattern(data.get("key_pattern", DEFAULT_KEY_PATTERN)),
            reduced_redundancy=_parse_bool("reduced_redundancy", data.get("reduced_redundancy", False)),
            keep_files=_parse_bool("keep_files", data.get("keep_files", False)),
            root_dir=_as_text(_expand_env(data.get("root_dir", ""))),
            timeout_sec=_parse_float("timeout_sec", data.get("timeout_sec", DEFAULT_TIMEOUT)),
            verify_tls=_parse_bool("verify_tls", data.get("verify_tls", True)),
            verify_on_init=_parse_bool("verify_on_init", data.get("verify_on_init", False)),
        )


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def _read_env_bool(key: str) -> bool | None:
    value = _read_env(key)
    if value is None:
        return None
    return _parse_bool(key, value)


def _read_env_float(key: str) -> float | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    return _parse_float(key, value)


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_pattern(value: Any) -> str:
    # Spaces are significant: each one becomes "-" in the resolved key.
    if value is None:
        return ""
    return str(value)


def load_env_overrides() -> dict[str, Any]:
    """Collect uploader settings present in the environment."""

    overrides: dict[str, Any] = {}
    text_vars = {
        "backend": BACKEND_ENV,
        "endpoint": ENDPOINT_ENV,
        "region": REGION_ENV,
        "access_key": ACCESS_KEY_ENV,
        "secret_key": SECRET_KEY_ENV,
        "bucket": BUCKET_ENV,
        "root_dir": ROOT_DIR_ENV,
    }
    for name, env_key in text_vars.items():
        value = _read_env(env_key)
        if value:
            overrides[name] = value
    pattern = os.getenv(KEY_PATTERN_ENV)
    if pattern:
        overrides["key_pattern"] = pattern
    for name, env_key in (("reduced_redundancy", REDUCED_REDUNDANCY_ENV), ("keep_files", KEEP_FILES_ENV)):
        flag = _read_env_bool(env_key)
        if flag is not None:
            overrides[name] = flag
    timeout = _read_env_float(TIMEOUT_ENV)
    if timeout is not None:
        overrides["timeout_sec"] = timeout
    return overrides


def resolve_config(
    profile: str | None = None,
    *,
    config_path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> UploaderConfig:
    """Resolve configuration from a profile, the environment and explicit overrides.

    Precedence is ``overrides`` > environment > profile > defaults. ``None``
    values in ``overrides`` are ignored so CLI options can be passed through
    unconditionally.
    """

    base = UploaderConfig.from_profile(profile, config_path=config_path) if profile else UploaderConfig()
    merged: dict[str, Any] = dict(load_env_overrides())
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value
    if not merged:
        return base
    known = {f.name for f in fields(UploaderConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigError(f"Unknown uploader config keys: {', '.join(unknown)}")
    return replace(base, **merged)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if "${" in value and "}" in value and expanded == value:
            raise ConfigError(f"Environment variable not set for value: {value}")
        return expanded
    return value


def _load_profiles_file(*, path: str | Path | None) -> dict[str, Mapping[str, Any]]:
    cfg_path = resolve_config_path(path or DEFAULT_PROFILES_FILE)
    if not cfg_path.exists():
        raise ConfigError(f"profiles file not found at {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{cfg_path} must contain a mapping")
    section = data.get(PROFILES_SECTION)
    if not isinstance(section, Mapping):
        raise ConfigError(f"{cfg_path} missing '{PROFILES_SECTION}' section")
    profiles: dict[str, Mapping[str, Any]] = {}
    for key, value in section.items():
        if not isinstance(value, Mapping):
            get_logger().warning("Ignoring uploader profile %s with invalid type", key)
            continue
        profiles[str(key)] = value
    if not profiles:
        raise ConfigError(f"No uploader profiles defined in {cfg_path}")
    return profiles


__all__ = [
    "UploaderConfig",
    "DEFAULT_TIMEOUT",
    "REDUCED_REDUNDANCY",
    "BACKEND_ENV",
    "ENDPOINT_ENV",
    "REGION_ENV",
    "ACCESS_KEY_ENV",
    "SECRET_KEY_ENV",
    "BUCKET_ENV",
    "KEY_PATTERN_ENV",
    "REDUCED_REDUNDANCY_ENV",
    "KEEP_FILES_ENV",
    "ROOT_DIR_ENV",
    "TIMEOUT_ENV",
    "load_env_overrides",
    "resolve_config",
]
