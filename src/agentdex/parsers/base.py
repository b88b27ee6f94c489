"""Entity model and parser interface for agentdex.

Every artifact discovered on disk is materialized as one of the frozen
entity dataclasses below. They share the fields of ``BaseEntity`` (a
stable id, display name, absolute path, scope, owning project, symlink
metadata, raw content, modification time and tool discriminator) and add
kind-specific fields on top. Inheritance keeps the base fields flat, so
``to_dict()`` produces records without a nested "base" wrapper.

The set of kinds is closed: ``EntityKind`` names every variant and
``ENTITY_TYPES`` maps each kind to its class. Consumers dispatch on
``entity.kind`` instead of testing for attributes.

Parsers implement the two-phase ``EntityParser`` interface:

- ``can_parse(path)`` -- a cheap filesystem check.
- ``parse(path, context)`` -- materialize entities, never raising for a
  single unreadable or malformed file.
"""

from __future__ import annotations

import enum
import hashlib
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Union

logger = logging.getLogger(__name__)


class EntityKind(str, enum.Enum):
    """Discriminator for the closed set of entity variants."""

    SETTINGS = "settings"
    MEMORY = "memory"
    AGENT = "agent"
    SKILL = "skill"
    COMMAND = "command"
    HOOK = "hook"
    PLUGIN = "plugin"
    MCP = "mcp"


class Scope(str, enum.Enum):
    """Where an entity applies: every project, or one project."""

    GLOBAL = "global"
    PROJECT = "project"


# ---------------------------------------------------------------------------
# Identity and filesystem helpers
# ---------------------------------------------------------------------------


def make_entity_id(kind: EntityKind, identity: str) -> str:
    """Derive a stable id from an entity's identity string.

    The identity is usually the absolute path, so re-scanning an unchanged
    tree yields the same ids.
    """
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()[:16]
    return f"{kind.value}_{digest}"


def last_modified_ms(path: Path) -> int:
    """Modification time in epoch milliseconds, or 0 if unavailable."""
    try:
        return int(path.stat().st_mtime * 1000)
    except OSError:
        return 0


def symlink_target(path: Path) -> tuple[bool, str | None]:
    """Return ``(is_symlink, raw_target)`` for a path.

    The target is the link text as stored on disk, or None when the link
    cannot be read.
    """
    if not path.is_symlink():
        return False, None
    try:
        return True, os.readlink(path)
    except OSError:
        return True, None


def read_text(path: Path) -> str | None:
    """Read a UTF-8 text file, returning None on any read failure."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("Unreadable file: %s", path)
        return None


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Entity variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BaseEntity:
    """Fields shared by every discovered entity.

    Attributes:
        id: Stable identifier derived from the entity's absolute path.
        name: Display name (file stem, skill directory name, ...).
        path: Absolute path of the entity's primary file.
        scope: Global or project scope.
        tool: Tool discriminator (``ToolProfile.tool_id``).
        project_path: Owning project root, None for global entities.
        is_symlink: True if the entity's path (or directory) is a symlink.
        symlink_target: Raw link text when ``is_symlink`` is True.
        content: Raw file text, None when absent or unreadable.
        last_modified: Modification time in epoch milliseconds.
    """

    kind: ClassVar[EntityKind]

    id: str
    name: str
    path: Path
    scope: Scope
    tool: str
    project_path: Path | None = None
    is_symlink: bool = False
    symlink_target: str | None = None
    content: str | None = None
    last_modified: int = 0

    @property
    def logical_name(self) -> str:
        """Name under which the owning tool resolves this entity."""
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a flat JSON-compatible dict with a ``type`` key."""
        data: dict[str, Any] = {"type": self.kind.value}
        for f in fields(self):
            data[f.name] = _jsonable(getattr(self, f.name))
        return data


@dataclass(frozen=True)
class SettingsEntity(BaseEntity):
    """A tool settings file (JSON or JSONC).

    ``parsed`` is None when the file could not be parsed; ``parse_error``
    then carries the reason.
    """

    kind: ClassVar[EntityKind] = EntityKind.SETTINGS

    variant: str = "project"  # "global", "project", "local"
    parsed: dict[str, Any] | None = None
    parse_error: str | None = None

    @property
    def logical_name(self) -> str:
        # All layers of one tool's settings merge into a single effective config.
        return f"{self.tool}:settings"


@dataclass(frozen=True)
class MemoryEntity(BaseEntity):
    """A memory/instructions file (``CLAUDE.md`` or ``AGENTS.md``)."""

    kind: ClassVar[EntityKind] = EntityKind.MEMORY

    variant: str = "root"  # "root" or "config_dir"


@dataclass(frozen=True)
class AgentEntity(BaseEntity):
    """A sub-agent definition: one Markdown file with frontmatter."""

    kind: ClassVar[EntityKind] = EntityKind.AGENT

    frontmatter: dict[str, Any] | None = None
    body: str = ""


@dataclass(frozen=True)
class SkillEntity(BaseEntity):
    """A skill: a directory with ``SKILL.md`` plus supporting files."""

    kind: ClassVar[EntityKind] = EntityKind.SKILL

    skill_dir: Path | None = None
    frontmatter: dict[str, Any] | None = None
    body: str = ""
    supporting_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class CommandEntity(BaseEntity):
    """A slash command; nested directories form its namespace."""

    kind: ClassVar[EntityKind] = EntityKind.COMMAND

    namespace: str | None = None
    frontmatter: dict[str, Any] | None = None
    body: str = ""

    @property
    def logical_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}:{self.name}"
        return self.name


@dataclass(frozen=True)
class HookDefinition:
    """One action inside a hook matcher group."""

    type: str
    command: str | None = None
    prompt: str | None = None
    timeout: int | None = None
    once: bool | None = None


@dataclass(frozen=True)
class HookEntity(BaseEntity):
    """One ``(event, matcher)`` group from a settings file's hooks section.

    ``path`` is the settings file the hook was declared in; ``source``
    records which settings layer that file is.
    """

    kind: ClassVar[EntityKind] = EntityKind.HOOK

    event: str = ""
    matcher: str | None = None
    hooks: tuple[HookDefinition, ...] = ()
    source: str = "global"  # "global", "project", "local"


@dataclass(frozen=True)
class McpServerConfig:
    """Normalized MCP server declaration."""

    type: str | None = None
    command: str | None = None
    args: tuple[str, ...] = ()
    url: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class McpServerEntity(BaseEntity):
    """An MCP server declaration; ``path`` is the declaring file."""

    kind: ClassVar[EntityKind] = EntityKind.MCP

    transport: str = "unknown"  # "stdio", "http", "sse", "unknown"
    config: McpServerConfig = field(default_factory=McpServerConfig)
    is_from_plugin: bool = False
    plugin_name: str | None = None


@dataclass(frozen=True)
class PluginEntity(BaseEntity):
    """A plugin directory and its capability flags."""

    kind: ClassVar[EntityKind] = EntityKind.PLUGIN

    plugin_dir: Path | None = None
    manifest: dict[str, Any] | None = None
    marketplace: str | None = None
    version: str | None = None
    install_scope: str | None = None  # "user", "project", "local"
    has_commands: bool = False
    has_agents: bool = False
    has_skills: bool = False
    has_hooks: bool = False
    has_mcp: bool = False
    has_lsp: bool = False


Entity = Union[
    SettingsEntity,
    MemoryEntity,
    AgentEntity,
    SkillEntity,
    CommandEntity,
    HookEntity,
    PluginEntity,
    McpServerEntity,
]

ENTITY_TYPES: dict[EntityKind, type[BaseEntity]] = {
    EntityKind.SETTINGS: SettingsEntity,
    EntityKind.MEMORY: MemoryEntity,
    EntityKind.AGENT: AgentEntity,
    EntityKind.SKILL: SkillEntity,
    EntityKind.COMMAND: CommandEntity,
    EntityKind.HOOK: HookEntity,
    EntityKind.PLUGIN: PluginEntity,
    EntityKind.MCP: McpServerEntity,
}


# ---------------------------------------------------------------------------
# Parser interface
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntityContext:
    """Where a batch of entities comes from.

    Attributes:
        tool: Tool discriminator stamped on every entity.
        scope: Global or project scope.
        project_path: Owning project root for project scope.
    """

    tool: str
    scope: Scope
    project_path: Path | None = None

    def base_fields(self, kind: EntityKind, name: str, path: Path) -> dict[str, Any]:
        """Build the shared ``BaseEntity`` keyword arguments for ``path``."""
        is_link, target = symlink_target(path)
        return {
            "id": make_entity_id(kind, str(path)),
            "name": name,
            "path": path,
            "scope": self.scope,
            "tool": self.tool,
            "project_path": self.project_path,
            "is_symlink": is_link,
            "symlink_target": target,
            "last_modified": last_modified_ms(path),
        }


class EntityParser(ABC):
    """Abstract base class for per-kind entity parsers.

    The two-phase API (check then parse) lets the extractor try a parser
    against a resolved path without committing to a full read until the
    check succeeds.
    """

    kind: ClassVar[EntityKind]

    @abstractmethod
    def can_parse(self, path: Path) -> bool:
        """Probe a path to determine if this parser has anything to read.

        The check should be a cheap existence test, not a content parse.
        """

    @abstractmethod
    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        """Materialize all entities found at ``path``.

        Must not raise on malformed content or a single unreadable file --
        skip or degrade that entity while parsing the rest.

        Args:
            path: File or directory resolved from the path conventions.
            context: Tool, scope and owning project of the batch.

        Returns:
            Entities in deterministic (sorted) order.
        """
