"""Data models for the discovery module.

Contains the result types produced by ``ProjectScanner`` and
``DiscoveryOrchestrator``: discovered projects, per-project entity
counts, and the immutable snapshot of one discovery run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from agentdex.core.consistency import ConfigState
from agentdex.core.duplicates import DuplicateGroup
from agentdex.core.symlinks import SymlinkInfo
from agentdex.parsers.base import BaseEntity, EntityKind


@dataclass(frozen=True)
class EntityCounts:
    """Number of entities of each kind."""

    settings: int = 0
    memory: int = 0
    agents: int = 0
    skills: int = 0
    commands: int = 0
    hooks: int = 0
    plugins: int = 0
    mcp_servers: int = 0

    @classmethod
    def from_entities(cls, entities: Iterable[BaseEntity]) -> EntityCounts:
        tally = {kind: 0 for kind in EntityKind}
        for entity in entities:
            tally[entity.kind] += 1
        return cls(**{SNAPSHOT_KEYS[kind]: n for kind, n in tally.items()})

    @property
    def total(self) -> int:
        return sum(self.to_dict().values())

    def to_dict(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in SNAPSHOT_KEYS.values()}


@dataclass(frozen=True)
class Project:
    """A directory holding tool configuration.

    Attributes:
        path: Absolute, canonical project root.
        name: Display name (the directory name).
        tools: Ids of the tools whose config directory is present.
        has_legacy_memory: ``CLAUDE.md`` exists at the root.
        has_universal_memory: ``AGENTS.md`` exists at the root.
        has_mcp_config: A project MCP declaration file exists.
        markers: Every marker found, as root-relative names.
        depth: Nesting depth below other projects (0 = top level).
        parent_path: Nearest enclosing project, if nested.
        counts: Entities owned by this project, set by the orchestrator.
        config_state: Memory-file classification, set by the orchestrator.
    """

    path: Path
    name: str
    tools: tuple[str, ...] = ()
    has_legacy_memory: bool = False
    has_universal_memory: bool = False
    has_mcp_config: bool = False
    markers: tuple[str, ...] = ()
    depth: int = 0
    parent_path: Path | None = None
    counts: EntityCounts = field(default_factory=EntityCounts)
    config_state: ConfigState | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "name": self.name,
            "tools": list(self.tools),
            "has_legacy_memory": self.has_legacy_memory,
            "has_universal_memory": self.has_universal_memory,
            "has_mcp_config": self.has_mcp_config,
            "markers": list(self.markers),
            "depth": self.depth,
            "parent_path": str(self.parent_path) if self.parent_path else None,
            "counts": self.counts.to_dict(),
            "config_state": self.config_state.to_dict() if self.config_state else None,
        }


# Entity kind -> key used in snapshots and counts.
SNAPSHOT_KEYS: dict[EntityKind, str] = {
    EntityKind.SETTINGS: "settings",
    EntityKind.MEMORY: "memory",
    EntityKind.AGENT: "agents",
    EntityKind.SKILL: "skills",
    EntityKind.COMMAND: "commands",
    EntityKind.HOOK: "hooks",
    EntityKind.PLUGIN: "plugins",
    EntityKind.MCP: "mcp_servers",
}


@dataclass(frozen=True)
class Snapshot:
    """The complete, immutable result of one discovery run.

    Attributes:
        projects: Discovered projects in scanner order.
        entities: Read-only mapping of kind to entities, each in discovery
            order.
        duplicates: Name collisions with precedence ranks.
        symlinks: Symlink audit findings.
        discovered_at: When the run completed (UTC).
    """

    projects: tuple[Project, ...]
    entities: Mapping[EntityKind, tuple[BaseEntity, ...]]
    duplicates: tuple[DuplicateGroup, ...]
    symlinks: tuple[SymlinkInfo, ...]
    discovered_at: datetime

    def of_kind(self, kind: EntityKind) -> tuple[BaseEntity, ...]:
        return self.entities.get(kind, ())

    def all_entities(self) -> Iterator[BaseEntity]:
        for kind in SNAPSHOT_KEYS:
            yield from self.of_kind(kind)

    def get(self, entity_id: str) -> BaseEntity | None:
        """Look up an entity by id."""
        for entity in self.all_entities():
            if entity.id == entity_id:
                return entity
        return None

    @property
    def settings(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.SETTINGS)

    @property
    def memory(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.MEMORY)

    @property
    def agents(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.AGENT)

    @property
    def skills(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.SKILL)

    @property
    def commands(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.COMMAND)

    @property
    def hooks(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.HOOK)

    @property
    def plugins(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.PLUGIN)

    @property
    def mcp_servers(self) -> tuple[BaseEntity, ...]:
        return self.of_kind(EntityKind.MCP)

    @property
    def counts(self) -> EntityCounts:
        return EntityCounts.from_entities(self.all_entities())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat snapshot shape (JSON-compatible)."""
        data: dict[str, Any] = {"projects": [p.to_dict() for p in self.projects]}
        for kind, key in SNAPSHOT_KEYS.items():
            data[key] = [e.to_dict() for e in self.of_kind(kind)]
        data["duplicates"] = [g.to_dict() for g in self.duplicates]
        data["symlinks"] = [s.to_dict() for s in self.symlinks]
        data["discovered_at"] = self.discovered_at.isoformat()
        return data
