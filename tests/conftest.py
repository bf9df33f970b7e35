from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for entry in (SRC_ROOT, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


@pytest.fixture(autouse=True)
def _restore_package_loggers() -> Iterator[None]:
    yield
    for name in ("trackreplay", "trackreplay_core"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no configuration in the environment."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRACKREPLAY_CONFIG", raising=False)
    return tmp_path
