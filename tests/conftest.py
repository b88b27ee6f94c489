"""Shared fixtures for agentdex tests."""

import pathlib

import pytest

from agentdex.config import CONFIG_ENV_VAR, DiscoveryConfig


@pytest.fixture
def home(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """A fake, canonical home directory that ``Path.home()`` points to."""
    home_dir = (tmp_path / "home").resolve()
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return home_dir


@pytest.fixture
def code_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A canonical directory to search for projects, outside the home."""
    root = (tmp_path / "code").resolve()
    root.mkdir()
    return root


@pytest.fixture
def config(home: pathlib.Path, code_root: pathlib.Path) -> DiscoveryConfig:
    """Discovery config scanning only ``code_root`` with a fake home."""
    return DiscoveryConfig(home=home, roots=(code_root,), include_home=False, max_workers=4)
