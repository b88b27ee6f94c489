"""Entity extraction for one (tool, scope, kind, project) unit.

``EntityExtractor`` resolves the paths a tool uses for one entity kind
(via its ``ToolProfile``) and hands each resolved path to the matching
parser. Units are independent -- they read disjoint files and share no
mutable state -- so the orchestrator runs them concurrently.

Per-kind resolution:

- SETTINGS: every settings file in the config directory (plus the local
  overrides file and root-level settings for projects). Hooks are
  derived from the parsed settings in the same unit.
- MEMORY: the tool's memory file at the base directory and inside the
  config directory.
- AGENT / SKILL / COMMAND / PLUGIN: the kind's directory.
- MCP: the user or project MCP file, the ``mcp`` key of the settings
  files, and servers provided by plugins -- unified per server name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from agentdex.discovery.tool_registry import ToolProfile
from agentdex.parsers.base import (
    BaseEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    PluginEntity,
    Scope,
    SettingsEntity,
)
from agentdex.parsers.markdown_entities import AgentParser, CommandParser, SkillParser
from agentdex.parsers.mcp_config import CLAUDE_SERVERS_KEY, McpConfigParser, unify_servers
from agentdex.parsers.memory import VARIANT_CONFIG_DIR, VARIANT_ROOT, MemoryParser
from agentdex.parsers.plugins import PluginParser, parse_installed_plugins, plugin_mcp_servers
from agentdex.parsers.settings import (
    VARIANT_GLOBAL,
    VARIANT_LOCAL,
    VARIANT_PROJECT,
    SettingsParser,
    extract_hooks,
)

logger = logging.getLogger(__name__)

# Kinds that are extracted as units. Hooks come out of SETTINGS units.
UNIT_KINDS: tuple[EntityKind, ...] = (
    EntityKind.SETTINGS,
    EntityKind.MEMORY,
    EntityKind.AGENT,
    EntityKind.SKILL,
    EntityKind.COMMAND,
    EntityKind.PLUGIN,
    EntityKind.MCP,
)

_DIRECTORY_PARSERS: dict[EntityKind, EntityParser] = {
    EntityKind.AGENT: AgentParser(),
    EntityKind.SKILL: SkillParser(),
    EntityKind.COMMAND: CommandParser(),
}


@dataclass(frozen=True)
class ExtractionUnit:
    """One independent piece of extraction work.

    Attributes:
        tool: Profile of the tool being extracted.
        scope: Global or project scope.
        kind: Entity kind to extract.
        base: Home directory (global) or project root (project).
    """

    tool: ToolProfile
    scope: Scope
    kind: EntityKind
    base: Path

    @property
    def project_path(self) -> Path | None:
        return self.base if self.scope is Scope.PROJECT else None

    @property
    def context(self) -> EntityContext:
        return EntityContext(tool=self.tool.tool_id, scope=self.scope, project_path=self.project_path)

    @property
    def config_dir(self) -> Path:
        return self.tool.config_dir(self.scope, self.base)

    def describe(self) -> str:
        where = self.base if self.scope is Scope.PROJECT else "global"
        return f"{self.tool.tool_id}/{self.kind.value}@{where}"


class EntityExtractor:
    """Materialize the entities of one ``ExtractionUnit``."""

    def extract(self, unit: ExtractionUnit) -> list[BaseEntity]:
        """Extract every entity the unit covers.

        Args:
            unit: The (tool, scope, kind, base) to extract.

        Returns:
            Entities in deterministic order. Missing paths yield nothing.
        """
        kind = unit.kind
        if kind is EntityKind.SETTINGS:
            return self._settings(unit)
        if kind is EntityKind.MEMORY:
            return self._memory(unit)
        if kind is EntityKind.PLUGIN:
            return self._plugins(unit)
        if kind is EntityKind.MCP:
            return self._mcp(unit)
        if kind in _DIRECTORY_PARSERS:
            directory = unit.tool.kind_dir(kind, unit.scope, unit.base)
            if directory is None:
                return []
            return _DIRECTORY_PARSERS[kind].parse(directory, unit.context)
        logger.debug("No extraction rule for %s", unit.describe())
        return []

    # -- Settings and hooks -------------------------------------------------

    def settings_files(self, unit: ExtractionUnit) -> list[tuple[Path, str]]:
        """Resolve ``(path, variant)`` for every settings file of a unit."""
        tool, config_dir = unit.tool, unit.config_dir
        if unit.scope is Scope.GLOBAL:
            return [(config_dir / name, VARIANT_GLOBAL) for name in tool.settings_files]
        files = [(config_dir / name, VARIANT_PROJECT) for name in tool.settings_files]
        if tool.local_settings_file:
            files.append((config_dir / tool.local_settings_file, VARIANT_LOCAL))
        if tool.root_settings:
            files.extend((unit.base / name, VARIANT_PROJECT) for name in tool.settings_files)
        return files

    def _settings(self, unit: ExtractionUnit) -> list[BaseEntity]:
        results: list[BaseEntity] = []
        hooks: list[BaseEntity] = []
        for path, variant in self.settings_files(unit):
            for entity in SettingsParser(variant).parse(path, unit.context):
                results.append(entity)
                if isinstance(entity, SettingsEntity):
                    hooks.extend(extract_hooks(entity))
        return results + hooks

    # -- Memory -------------------------------------------------------------

    def _memory(self, unit: ExtractionUnit) -> list[BaseEntity]:
        memory_file = unit.tool.memory_file
        if memory_file is None:
            return []
        candidates: list[tuple[Path, str]] = []
        if unit.scope is Scope.PROJECT or unit.tool.home_memory:
            candidates.append((unit.base / memory_file, VARIANT_ROOT))
        candidates.append((unit.config_dir / memory_file, VARIANT_CONFIG_DIR))

        results: list[BaseEntity] = []
        for path, variant in candidates:
            results.extend(MemoryParser(variant).parse(path, unit.context))
        return results

    # -- Plugins ------------------------------------------------------------

    def _plugins(self, unit: ExtractionUnit) -> list[BaseEntity]:
        plugins_dir = unit.tool.kind_dir(EntityKind.PLUGIN, unit.scope, unit.base)
        if plugins_dir is None:
            return []
        results = PluginParser().parse(plugins_dir, unit.context)
        index = unit.tool.installed_plugins_file
        if unit.scope is Scope.GLOBAL and index:
            results.extend(parse_installed_plugins(plugins_dir / index, unit.tool.tool_id))
        return results

    # -- MCP servers --------------------------------------------------------

    def _mcp(self, unit: ExtractionUnit) -> list[BaseEntity]:
        tool, context = unit.tool, unit.context
        batches: list[list[BaseEntity]] = []

        if unit.scope is Scope.GLOBAL and tool.user_mcp_file:
            batches.append(McpConfigParser(CLAUDE_SERVERS_KEY).parse(unit.base / tool.user_mcp_file, context))
        if unit.scope is Scope.PROJECT and tool.project_mcp_file:
            parser = McpConfigParser(CLAUDE_SERVERS_KEY, allow_bare=True)
            batches.append(parser.parse(unit.base / tool.project_mcp_file, context))
        if tool.settings_mcp_key:
            parser = McpConfigParser(tool.settings_mcp_key)
            for path, _ in self.settings_files(unit):
                batches.append(parser.parse(path, context))

        for plugin in self._plugins(unit):
            if isinstance(plugin, PluginEntity):
                plugin_context = EntityContext(tool.tool_id, plugin.scope, plugin.project_path)
                batches.append(plugin_mcp_servers(plugin, plugin_context))

        return unify_servers(batches)
