from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


load_dotenv(override=False)

WORK_DIR_ENV = "ARTIFACTSYNC_WORK_DIR"
ROOT_ENV = "ARTIFACTSYNC_ROOT"
USER_DIR_NAME = ".artifactsync"


def _project_root() -> Path:
    """Directory holding the ``artifactsync`` package.

    A source checkout returns the repository root; an installed copy returns
    its ``site-packages`` directory.
    """
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    return Path(__file__).resolve().parents[2]


def _is_source_checkout(root: Path) -> bool:
    return (root / "pyproject.toml").is_file()


def _app_dir_writable_base() -> Path:
    """Writable base for runtime files (logs).

    - Source checkout: <repo>/artifactsync
    - Installed package: ~/.artifactsync, since site-packages may be read-only
    """
    root = _project_root()
    if _is_source_checkout(root):
        return root / "artifactsync"
    return Path.home() / USER_DIR_NAME


def _config_dir() -> Path:
    return _project_root() / "artifactsync" / "config"


def _work_dir() -> Path:
    env = os.getenv(WORK_DIR_ENV)
    if env:
        return Path(env)
    return _app_dir_writable_base() / "work"


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    # Support paths with or without leading 'artifactsync/'
    parts = p.parts
    if parts and parts[0] == "artifactsync":
        return _project_root() / p
    return _config_dir() / p
