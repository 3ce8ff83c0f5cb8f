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
def _isolated_storage_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KVTREE_* variables from the host out of every test."""
    for env_name in ("KVTREE_ENCODING", "KVTREE_CREATE_MISSING", "KVTREE_LOG_LEVEL"):
        monkeypatch.delenv(env_name, raising=False)
