"""Shared fixtures for CLI tests.

Every CLI test runs against the fake ``home`` from the top-level
conftest, so global configuration is read from a temporary directory and
never from the real user's home.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from tests.discovery.helpers import create_claude_project, create_opencode_project


@pytest.fixture
def runner(home: Path) -> CliRunner:
    """A Click CliRunner bound to the fake home directory."""
    return CliRunner()


@pytest.fixture
def mixed_root(code_root: Path) -> Path:
    """A root with one project per memory-file state that needs work.

    - ``legacy`` -- only ``CLAUDE.md`` (needs_migration)
    - ``modern`` -- only ``AGENTS.md`` (missing_symlink)
    """
    create_claude_project(code_root, "legacy", memory="Hello\n")
    create_opencode_project(code_root, "modern")
    return code_root
