"""Reconcile the legacy and universal memory-file conventions.

Claude Code reads ``CLAUDE.md``; OpenCode and most other assistants read
``AGENTS.md``. A project is consistent when ``AGENTS.md`` is the single
source of truth and ``CLAUDE.md`` is a symlink to it.

Decision table (legacy = ``CLAUDE.md``, universal = ``AGENTS.md``):

=========================  ================  ===================
legacy                     universal         state
=========================  ================  ===================
symlink to universal       file              ``correct``
missing or blank file      file              ``missing_symlink``
file with content          missing or blank  ``needs_migration``
file with content          file with content ``conflict``
missing                    missing           ``empty``
symlink elsewhere          file              ``conflict``
anything else                                ``conflict``
=========================  ================  ===================

A "blank" file holds only whitespace; treating it as absent never loses
content. Unreadable files count as having content.

Fixes:

- ``missing_symlink`` -- remove a blank legacy file if present, then link
  ``CLAUDE.md -> AGENTS.md``.
- ``needs_migration`` -- move ``CLAUDE.md`` over ``AGENTS.md``, then link.
- ``empty`` -- create an empty ``AGENTS.md``, then link.
- ``correct`` -- no-op.
- ``conflict`` -- refused with ``ConfigFixError``; nothing is touched.

The link is always created with the relative target ``AGENTS.md`` so the
project can be moved or cloned without breaking it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from agentdex.core.consistency.models import (
    AUTO_FIXABLE,
    BulkFixReport,
    ConfigState,
    ConfigStateType,
    FileStatus,
    FixOutcome,
)
from agentdex.exceptions import AgentdexError, ConfigFixError, ConsistencyError
from agentdex.parsers.memory import LEGACY_MEMORY_FILE, UNIVERSAL_MEMORY_FILE

logger = logging.getLogger(__name__)

MSG_ALREADY_CORRECT = "Configuration is already correct"
MSG_CREATED_SYMLINK = f"Created {LEGACY_MEMORY_FILE} → {UNIVERSAL_MEMORY_FILE} symlink"
MSG_MIGRATED = (
    f"Migrated {LEGACY_MEMORY_FILE} content to {UNIVERSAL_MEMORY_FILE} and created symlink"
)
MSG_CREATED_EMPTY = f"Created empty {UNIVERSAL_MEMORY_FILE} and {LEGACY_MEMORY_FILE} symlink"
MSG_CONFLICT = (
    f"Cannot auto-fix: both {UNIVERSAL_MEMORY_FILE} and {LEGACY_MEMORY_FILE} have content. "
    "Please resolve manually."
)


def file_status(path: Path) -> FileStatus:
    """Classify what sits at ``path`` without following symlinks."""
    if path.is_symlink():
        return FileStatus.SYMLINK
    if path.exists():
        return FileStatus.FILE
    return FileStatus.MISSING


def _has_content(path: Path) -> bool:
    try:
        return bool(path.read_text(encoding="utf-8").strip())
    except (OSError, UnicodeDecodeError):
        return True


def _links_to(link: Path, target: Path) -> bool:
    """True if ``link`` resolves to the regular file at ``target``."""
    if not target.exists() or target.is_symlink():
        return False
    return os.path.realpath(link) == os.path.realpath(target)


class ConfigConsistencyEngine:
    """Classify and fix a project's memory-file layout.

    Stateless: every call re-reads the filesystem.
    """

    def __init__(
        self,
        legacy_name: str = LEGACY_MEMORY_FILE,
        universal_name: str = UNIVERSAL_MEMORY_FILE,
    ) -> None:
        self.legacy_name = legacy_name
        self.universal_name = universal_name

    # -- Classification -----------------------------------------------------

    def classify(
        self,
        legacy: FileStatus,
        universal: FileStatus,
        links_to_universal: bool = False,
        legacy_has_content: bool = True,
        universal_has_content: bool = True,
    ) -> ConfigStateType:
        """Apply the decision table to already-observed inputs.

        Args:
            legacy: Status of the legacy file.
            universal: Status of the universal file.
            links_to_universal: Whether a legacy symlink resolves to the
                universal file.
            legacy_has_content: False for a whitespace-only legacy file.
            universal_has_content: False for a whitespace-only universal
                file.
        """
        if legacy is FileStatus.SYMLINK and universal is FileStatus.FILE:
            return ConfigStateType.CORRECT if links_to_universal else ConfigStateType.CONFLICT
        if legacy is FileStatus.MISSING and universal is FileStatus.FILE:
            return ConfigStateType.MISSING_SYMLINK
        if legacy is FileStatus.FILE and universal is FileStatus.MISSING:
            return ConfigStateType.NEEDS_MIGRATION
        if legacy is FileStatus.FILE and universal is FileStatus.FILE:
            if not legacy_has_content:
                return ConfigStateType.MISSING_SYMLINK
            if not universal_has_content:
                return ConfigStateType.NEEDS_MIGRATION
            return ConfigStateType.CONFLICT
        if legacy is FileStatus.MISSING and universal is FileStatus.MISSING:
            return ConfigStateType.EMPTY
        return ConfigStateType.CONFLICT

    def get_state(self, project: Path) -> ConfigState:
        """Observe and classify one project.

        Raises:
            ConsistencyError: If ``project`` is not a directory.
        """
        if not project.is_dir():
            raise ConsistencyError(f"Path is not a directory: {project}")
        legacy_path = project / self.legacy_name
        universal_path = project / self.universal_name
        legacy = file_status(legacy_path)
        universal = file_status(universal_path)

        target: str | None = None
        if legacy is FileStatus.SYMLINK:
            try:
                target = os.readlink(legacy_path)
            except OSError:
                logger.warning("Cannot read symlink %s", legacy_path, exc_info=True)

        state = self.classify(
            legacy,
            universal,
            links_to_universal=legacy is FileStatus.SYMLINK and _links_to(legacy_path, universal_path),
            legacy_has_content=legacy is not FileStatus.FILE or _has_content(legacy_path),
            universal_has_content=universal is not FileStatus.FILE or _has_content(universal_path),
        )
        return ConfigState(
            project_path=project,
            legacy_status=legacy,
            universal_status=universal,
            legacy_symlink_target=target,
            state=state,
            can_auto_fix=state in AUTO_FIXABLE,
        )

    # -- Fixing -------------------------------------------------------------

    def fix(self, project: Path) -> str:
        """Bring one project to the ``correct`` state.

        Returns:
            A human-readable description of what was done.

        Raises:
            ConsistencyError: If ``project`` is not a directory.
            ConfigFixError: On ``conflict`` or when a filesystem
                operation fails.
        """
        current = self.get_state(project)
        legacy_path = project / self.legacy_name
        universal_path = project / self.universal_name
        state = current.state

        if state is ConfigStateType.CORRECT:
            return MSG_ALREADY_CORRECT
        if state is ConfigStateType.CONFLICT:
            raise ConfigFixError(MSG_CONFLICT)

        try:
            if state is ConfigStateType.MISSING_SYMLINK:
                if current.legacy_status is FileStatus.FILE:
                    legacy_path.unlink()
                message = MSG_CREATED_SYMLINK
            elif state is ConfigStateType.NEEDS_MIGRATION:
                os.replace(legacy_path, universal_path)
                message = MSG_MIGRATED
            else:
                universal_path.write_text("", encoding="utf-8")
                message = MSG_CREATED_EMPTY
            os.symlink(self.universal_name, legacy_path)
        except OSError as exc:
            raise ConfigFixError(f"Failed to fix {project}: {exc}") from exc

        logger.info("%s: %s", project, message)
        return message

    def fix_many(self, projects: Iterable[Path]) -> BulkFixReport:
        """Fix several projects, continuing past individual failures."""
        outcomes: list[FixOutcome] = []
        for project in projects:
            try:
                outcomes.append(FixOutcome(project, True, self.fix(project)))
            except AgentdexError as exc:
                logger.warning("Fix failed for %s: %s", project, exc)
                outcomes.append(FixOutcome(project, False, str(exc)))
        return BulkFixReport(outcomes=tuple(outcomes))
