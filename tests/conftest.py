"""
Pytest configuration and shared fixtures for patchwork tests.
"""

import sys
from pathlib import Path

import pytest


# Add the shared packages to sys.path so tests run without an install
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "shared"))


@pytest.fixture
def temp_dir(tmp_path):
    """Alias for pytest's tmp_path fixture."""
    return tmp_path


@pytest.fixture
def mock_home(temp_dir, monkeypatch):
    """Point $HOME at a temp dir with an empty ~/.config/patchwork."""
    monkeypatch.setenv("HOME", str(temp_dir))
    for var in (
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "CIRCLE_TOKEN",
        "CIRCLECI_TOKEN",
        "CIRCLECI_API_URL",
        "CIRCLECI_VCS_TYPE",
        "PATCHWORK_POLL_INTERVAL",
        "PATCHWORK_MAX_WAIT",
        "PATCHWORK_MAX_MONITORS",
        "PATCHWORK_FAIL_FAST",
        "PATCHWORK_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)

    (temp_dir / ".config" / "patchwork").mkdir(parents=True)
    return temp_dir


@pytest.fixture
def config_dir(mock_home):
    """Return the mocked ~/.config/patchwork directory."""
    return mock_home / ".config" / "patchwork"
