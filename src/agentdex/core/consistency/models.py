"""Memory-file consistency data models.

- ``FileStatus`` -- what sits at one memory-file path.
- ``ConfigStateType`` -- the five-way classification of a project.
- ``ConfigState`` -- a project's full classification result.
- ``FixOutcome`` / ``BulkFixReport`` -- results of fixing many projects.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any


class FileStatus(str, enum.Enum):
    """What sits at a memory-file path."""

    FILE = "file"
    SYMLINK = "symlink"
    MISSING = "missing"


class ConfigStateType(str, enum.Enum):
    """Classification of a project's legacy/universal memory files.

    - ``CORRECT`` -- universal file exists, legacy file links to it.
    - ``MISSING_SYMLINK`` -- universal file exists, legacy link missing.
    - ``NEEDS_MIGRATION`` -- only the legacy file has content.
    - ``CONFLICT`` -- both carry content, or an unexpected layout.
    - ``EMPTY`` -- neither file exists.
    """

    CORRECT = "correct"
    MISSING_SYMLINK = "missing_symlink"
    NEEDS_MIGRATION = "needs_migration"
    CONFLICT = "conflict"
    EMPTY = "empty"


AUTO_FIXABLE: frozenset[ConfigStateType] = frozenset({
    ConfigStateType.CORRECT,
    ConfigStateType.MISSING_SYMLINK,
    ConfigStateType.NEEDS_MIGRATION,
    ConfigStateType.EMPTY,
})


@dataclass(frozen=True)
class ConfigState:
    """Classification of one project's memory files.

    Attributes:
        project_path: The project root.
        legacy_status: Status of ``CLAUDE.md``.
        universal_status: Status of ``AGENTS.md``.
        legacy_symlink_target: Link text when ``CLAUDE.md`` is a symlink.
        state: The classification.
        can_auto_fix: False only for ``CONFLICT``.
    """

    project_path: Path
    legacy_status: FileStatus
    universal_status: FileStatus
    legacy_symlink_target: str | None
    state: ConfigStateType
    can_auto_fix: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_path": str(self.project_path),
            "legacy_status": self.legacy_status.value,
            "universal_status": self.universal_status.value,
            "legacy_symlink_target": self.legacy_symlink_target,
            "state": self.state.value,
            "can_auto_fix": self.can_auto_fix,
        }


@dataclass(frozen=True)
class FixOutcome:
    """Result of fixing one project."""

    project_path: Path
    ok: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"project_path": str(self.project_path), "ok": self.ok, "message": self.message}


@dataclass(frozen=True)
class BulkFixReport:
    """Results of a continue-on-error fix over many projects."""

    outcomes: tuple[FixOutcome, ...]

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
