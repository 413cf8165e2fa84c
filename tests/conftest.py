"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer STOCKROOM_* settings out of tests."""
    for env_name in (
        "STOCKROOM_CONFIG_FILE",
        "STOCKROOM_RAW_DIR",
        "STOCKROOM_OUTPUT_DIR",
        "STOCKROOM_PUBLISH_DIR",
        "STOCKROOM_INDEX_PATH_PREFIX",
        "STOCKROOM_CHAIN_SCOPE",
        "STOCKROOM_LOG_LEVEL",
    ):
        monkeypatch.delenv(env_name, raising=False)
