"""Duplicate group data models.

- ``DuplicateMember`` -- one entity taking part in a name collision.
- ``DuplicateGroup`` -- all entities sharing ``(kind, logical name)``,
  ordered by precedence.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from agentdex.parsers.base import EntityKind, Scope


@dataclass(frozen=True)
class DuplicateMember:
    """One entity in a duplicate group.

    Attributes:
        entity_id: Id of the colliding entity.
        path: Absolute path of the entity.
        scope: Global or project scope.
        project_path: Owning project, None for global entities.
        tool: Tool discriminator of the entity.
        rank: Precedence rank; 0 is the instance the tool would load.
    """

    entity_id: str
    path: Path
    scope: Scope
    project_path: Path | None
    tool: str
    rank: int

    @property
    def is_active(self) -> bool:
        return self.rank == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "path": str(self.path),
            "scope": self.scope.value,
            "project_path": str(self.project_path) if self.project_path else None,
            "tool": self.tool,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """Entities of one kind sharing one logical name.

    Only built for two or more members. ``members`` is sorted by rank and
    the ranks are exactly ``0 .. len(members) - 1``.
    """

    kind: EntityKind
    name: str
    members: tuple[DuplicateMember, ...]

    @property
    def active(self) -> DuplicateMember:
        """The member ranked 0."""
        return self.members[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "members": [m.to_dict() for m in self.members],
        }
