"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_questgraph_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep QG_* settings from the developer's shell out of test runs."""
    for name in ("QG_MAX_DEPTH", "QG_MAX_PATHS", "QG_CONFIG_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
