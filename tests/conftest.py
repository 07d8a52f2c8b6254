"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from bedlaunch.config.settings import HOME_ENV_VAR


@pytest.fixture
def launcher_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary launcher home, also exported via the home env var."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv(HOME_ENV_VAR, str(home))
    return home
