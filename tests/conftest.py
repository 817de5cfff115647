from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

CONFIG_ENV_PREFIX = "ARTIFACTSYNC_"


@pytest.fixture(autouse=True, scope="session")
def _isolated_work_dir(tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep log files out of the source tree."""

    os.environ["ARTIFACTSYNC_WORK_DIR"] = str(tmp_path_factory.mktemp("work"))
    from artifactsync.core.logger import get_logger

    get_logger()
    yield
    os.environ.pop("ARTIFACTSYNC_WORK_DIR", None)


@pytest.fixture(autouse=True)
def _clean_uploader_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop uploader settings a developer may have exported or put in .env."""

    for key in list(os.environ):
        if key.startswith(CONFIG_ENV_PREFIX) and key != "ARTIFACTSYNC_WORK_DIR":
            monkeypatch.delenv(key, raising=False)
