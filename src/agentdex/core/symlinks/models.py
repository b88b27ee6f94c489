"""Symlink audit finding."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from agentdex.parsers.base import BaseEntity, EntityKind


@dataclass(frozen=True)
class SymlinkInfo:
    """One symlink and the state of its target.

    Attributes:
        path: The link itself.
        raw_target: Link text as stored on disk, None if unreadable.
        target: Absolute, normalized target path, None if unreadable.
        target_exists: Whether the target exists right now.
        entity_id: Id of the entity owning the link, if any.
        entity_kind: Kind of that entity.
    """

    path: Path
    raw_target: str | None
    target: Path | None
    target_exists: bool
    entity_id: str | None = None
    entity_kind: EntityKind | None = None

    @property
    def is_broken(self) -> bool:
        return not self.target_exists

    def attributed_to(self, entity: BaseEntity) -> SymlinkInfo:
        """Return a copy carrying a back-reference to ``entity``."""
        return replace(self, entity_id=entity.id, entity_kind=entity.kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "raw_target": self.raw_target,
            "target": str(self.target) if self.target else None,
            "target_exists": self.target_exists,
            "entity_id": self.entity_id,
            "entity_kind": self.entity_kind.value if self.entity_kind else None,
        }
