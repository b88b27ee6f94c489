"""Tests for the memory-file consistency engine.

Covers the classification decision table, each automatic fix, idempotence,
refusal on conflict, and the continue-on-error bulk fix.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from agentdex.core.consistency import (
    ConfigConsistencyEngine,
    ConfigStateType,
    FileStatus,
    file_status,
)
from agentdex.exceptions import ConfigFixError, ConsistencyError

from tests.discovery.helpers import write


@pytest.fixture
def engine() -> ConfigConsistencyEngine:
    return ConfigConsistencyEngine()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "proj"
    path.mkdir()
    return path


def _state(engine: ConfigConsistencyEngine, project: Path) -> ConfigStateType:
    return engine.get_state(project).state


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassifyTable:

    @pytest.mark.parametrize(
        "legacy, universal, links, expected",
        [
            (FileStatus.SYMLINK, FileStatus.FILE, True, ConfigStateType.CORRECT),
            (FileStatus.SYMLINK, FileStatus.FILE, False, ConfigStateType.CONFLICT),
            (FileStatus.MISSING, FileStatus.FILE, False, ConfigStateType.MISSING_SYMLINK),
            (FileStatus.FILE, FileStatus.MISSING, False, ConfigStateType.NEEDS_MIGRATION),
            (FileStatus.FILE, FileStatus.FILE, False, ConfigStateType.CONFLICT),
            (FileStatus.MISSING, FileStatus.MISSING, False, ConfigStateType.EMPTY),
            (FileStatus.SYMLINK, FileStatus.MISSING, False, ConfigStateType.CONFLICT),
            (FileStatus.MISSING, FileStatus.SYMLINK, False, ConfigStateType.CONFLICT),
            (FileStatus.FILE, FileStatus.SYMLINK, False, ConfigStateType.CONFLICT),
        ],
    )
    def test_decision_table(self, engine, legacy, universal, links, expected) -> None:
        assert engine.classify(legacy, universal, links_to_universal=links) is expected

    def test_blank_files_count_as_absent(self, engine: ConfigConsistencyEngine) -> None:
        both = (FileStatus.FILE, FileStatus.FILE)
        assert engine.classify(*both, legacy_has_content=False) is ConfigStateType.MISSING_SYMLINK
        assert engine.classify(*both, universal_has_content=False) is ConfigStateType.NEEDS_MIGRATION


class TestGetState:

    def test_empty_project(self, engine, project: Path) -> None:
        state = engine.get_state(project)
        assert state.state is ConfigStateType.EMPTY
        assert state.can_auto_fix
        assert state.legacy_status is FileStatus.MISSING

    def test_correct_layout(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "# Rules\n")
        os.symlink("AGENTS.md", project / "CLAUDE.md")
        state = engine.get_state(project)
        assert state.state is ConfigStateType.CORRECT
        assert state.legacy_symlink_target == "AGENTS.md"

    def test_absolute_link_also_correct(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "# Rules\n")
        os.symlink(project / "AGENTS.md", project / "CLAUDE.md")
        assert _state(engine, project) is ConfigStateType.CORRECT

    def test_link_elsewhere_is_conflict(self, engine, project: Path, tmp_path: Path) -> None:
        write(project / "AGENTS.md", "# Rules\n")
        write(tmp_path / "other.md", "x")
        os.symlink(tmp_path / "other.md", project / "CLAUDE.md")
        state = engine.get_state(project)
        assert state.state is ConfigStateType.CONFLICT
        assert not state.can_auto_fix

    def test_both_with_content(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "a")
        write(project / "CLAUDE.md", "b")
        assert _state(engine, project) is ConfigStateType.CONFLICT

    def test_whitespace_legacy(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "a")
        write(project / "CLAUDE.md", "  \n\t\n")
        assert _state(engine, project) is ConfigStateType.MISSING_SYMLINK

    def test_not_a_directory(self, engine, tmp_path: Path) -> None:
        with pytest.raises(ConsistencyError):
            engine.get_state(write(tmp_path / "file.txt"))

    def test_file_status_does_not_follow_links(self, tmp_path: Path) -> None:
        os.symlink(tmp_path / "gone", tmp_path / "link")
        assert file_status(tmp_path / "link") is FileStatus.SYMLINK
        assert file_status(tmp_path / "gone") is FileStatus.MISSING

    def test_to_dict(self, engine, project: Path) -> None:
        data = engine.get_state(project).to_dict()
        assert data["state"] == "empty"
        assert data["legacy_status"] == "missing"


# ---------------------------------------------------------------------------
# Fixing
# ---------------------------------------------------------------------------


class TestFix:

    def test_migration_moves_content_and_links(self, engine, project: Path) -> None:
        write(project / "CLAUDE.md", "Hello")
        assert _state(engine, project) is ConfigStateType.NEEDS_MIGRATION

        message = engine.fix(project)
        assert "Migrated" in message
        assert (project / "AGENTS.md").read_text() == "Hello"
        assert (project / "CLAUDE.md").is_symlink()
        assert os.readlink(project / "CLAUDE.md") == "AGENTS.md"
        assert _state(engine, project) is ConfigStateType.CORRECT

    def test_migration_replaces_blank_universal(self, engine, project: Path) -> None:
        write(project / "CLAUDE.md", "Hello")
        write(project / "AGENTS.md", "\n")
        engine.fix(project)
        assert (project / "AGENTS.md").read_text() == "Hello"

    def test_missing_symlink(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "Rules")
        assert "symlink" in engine.fix(project)
        assert (project / "CLAUDE.md").read_text() == "Rules"
        assert _state(engine, project) is ConfigStateType.CORRECT

    def test_missing_symlink_removes_blank_legacy(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "Rules")
        write(project / "CLAUDE.md", "   ")
        engine.fix(project)
        assert (project / "CLAUDE.md").is_symlink()

    def test_empty_creates_both(self, engine, project: Path) -> None:
        engine.fix(project)
        assert (project / "AGENTS.md").read_text() == ""
        assert (project / "CLAUDE.md").is_symlink()
        assert _state(engine, project) is ConfigStateType.CORRECT

    def test_fix_is_idempotent(self, engine, project: Path) -> None:
        write(project / "CLAUDE.md", "Hello")
        engine.fix(project)
        assert engine.fix(project) == "Configuration is already correct"
        assert (project / "AGENTS.md").read_text() == "Hello"

    def test_conflict_is_refused_untouched(self, engine, project: Path) -> None:
        write(project / "AGENTS.md", "a")
        write(project / "CLAUDE.md", "b")
        with pytest.raises(ConfigFixError, match="resolve manually"):
            engine.fix(project)
        assert (project / "AGENTS.md").read_text() == "a"
        assert (project / "CLAUDE.md").read_text() == "b"
        assert not (project / "CLAUDE.md").is_symlink()


class TestFixMany:

    def test_continues_past_failures(self, engine, tmp_path: Path) -> None:
        good = tmp_path / "good"
        bad = tmp_path / "bad"
        write(good / "CLAUDE.md", "x")
        write(bad / "CLAUDE.md", "x")
        write(bad / "AGENTS.md", "y")
        missing = tmp_path / "missing"

        report = engine.fix_many([bad, missing, good])
        assert [o.ok for o in report.outcomes] == [False, False, True]
        assert report.succeeded == 1
        assert report.failed == 2
        assert (good / "CLAUDE.md").is_symlink()
        assert report.to_dict()["failed"] == 2
