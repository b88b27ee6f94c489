"""Parser for Claude Code plugins.

A plugin is a directory bundling commands, agents, skills, hooks, MCP
servers and LSP servers. It usually carries a manifest at
``.claude-plugin/plugin.json``; a directory without one still counts as a
plugin when it contains any capability marker.

Capability flags are computed from the presence of a subdirectory, a
marker file or a manifest key -- the capabilities themselves are not
parsed:

=============  ==================================  ===============
Flag           Marker                              Manifest key
=============  ==================================  ===============
has_commands   ``commands/``                       ``commands``
has_agents     ``agents/``                         ``agents``
has_skills     ``skills/``                         ``skills``
has_hooks      ``hooks/`` or ``hooks.json``        ``hooks``
has_mcp        ``.mcp.json``                       ``mcpServers``
has_lsp        ``.lsp.json``                       ``lspServers``
=============  ==================================  ===============

Marketplace plugins are listed in ``~/.claude/plugins/installed_plugins.json``
as ``name@marketplace`` keys mapping to a list of installations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from agentdex.parsers.base import (
    BaseEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    PluginEntity,
    Scope,
    make_entity_id,
    read_text,
    symlink_target,
)
from agentdex.parsers.mcp_config import (
    CLAUDE_SERVERS_KEY,
    PROJECT_MCP_FILE,
    McpConfigParser,
    servers_from_mapping,
)
from agentdex.parsers.settings import load_json_file

logger = logging.getLogger(__name__)

PLUGIN_MANIFEST = ".claude-plugin/plugin.json"
INSTALLED_PLUGINS_FILE = "installed_plugins.json"
LSP_FILE = ".lsp.json"

# Installation scopes in installed_plugins.json -> entity scope.
_INSTALL_SCOPES = {"user": Scope.GLOBAL, "project": Scope.PROJECT, "local": Scope.PROJECT}


def capability_flags(plugin_dir: Path, manifest: dict[str, Any] | None) -> dict[str, bool]:
    """Compute the ``has_*`` flags for a plugin directory."""
    keys = manifest or {}
    return {
        "has_commands": (plugin_dir / "commands").is_dir() or "commands" in keys,
        "has_agents": (plugin_dir / "agents").is_dir() or "agents" in keys,
        "has_skills": (plugin_dir / "skills").is_dir() or "skills" in keys,
        "has_hooks": (
            (plugin_dir / "hooks").is_dir()
            or (plugin_dir / "hooks.json").is_file()
            or "hooks" in keys
        ),
        "has_mcp": (plugin_dir / PROJECT_MCP_FILE).is_file() or "mcpServers" in keys,
        "has_lsp": (plugin_dir / LSP_FILE).is_file() or "lspServers" in keys,
    }


class PluginParser(EntityParser):
    """Parse every plugin directory inside a plugins root."""

    kind = EntityKind.PLUGIN

    def can_parse(self, path: Path) -> bool:
        return path.is_dir()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        try:
            entries = sorted(path.iterdir(), key=lambda p: p.name)
        except OSError:
            logger.warning("Cannot list plugins in %s", path, exc_info=True)
            return []
        results: list[BaseEntity] = []
        for plugin_dir in entries:
            plugin = self._parse_plugin(plugin_dir, context)
            if plugin is not None:
                results.append(plugin)
        return results

    def _parse_plugin(self, plugin_dir: Path, context: EntityContext) -> PluginEntity | None:
        if not plugin_dir.is_dir():
            return None
        manifest_path = plugin_dir / PLUGIN_MANIFEST
        manifest = load_json_file(manifest_path) if manifest_path.is_file() else None
        flags = capability_flags(plugin_dir, manifest)
        if not manifest_path.is_file() and not any(flags.values()):
            return None

        primary = manifest_path if manifest_path.is_file() else plugin_dir
        fields = context.base_fields(self.kind, plugin_dir.name, primary)
        fields["id"] = make_entity_id(self.kind, str(plugin_dir))
        fields["is_symlink"], fields["symlink_target"] = symlink_target(plugin_dir)
        version = manifest.get("version") if manifest else None
        return PluginEntity(
            **fields,
            content=read_text(manifest_path) if manifest is not None else None,
            plugin_dir=plugin_dir,
            manifest=manifest,
            version=version if isinstance(version, str) else None,
            **flags,
        )


def _installations(raw: Any) -> list[dict[str, Any]]:
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list):
        return [item for item in raw if isinstance(item, dict)]
    return []


def parse_installed_plugins(path: Path, tool: str) -> list[PluginEntity]:
    """Parse marketplace installations from ``installed_plugins.json``.

    Args:
        path: The ``installed_plugins.json`` file.
        tool: Tool discriminator for the resulting entities.

    Returns:
        One ``PluginEntity`` per installation. ``user`` installations are
        global; ``project`` and ``local`` ones belong to their
        ``projectPath``.
    """
    data = load_json_file(path)
    if data is None or not isinstance(data.get("plugins"), dict):
        return []

    results: list[PluginEntity] = []
    for full_name, raw in data["plugins"].items():
        plugin_name, _, marketplace = full_name.partition("@")
        for install in _installations(raw):
            if not isinstance(install.get("installPath"), str) or not install["installPath"]:
                logger.debug("Installation of %s has no installPath", full_name)
                continue
            scope_name = str(install.get("scope", "user"))
            scope = _INSTALL_SCOPES.get(scope_name, Scope.GLOBAL)
            project = install.get("projectPath") if scope is Scope.PROJECT else None
            install_path = Path(install["installPath"])
            manifest_path = install_path / PLUGIN_MANIFEST
            manifest = load_json_file(manifest_path) if manifest_path.is_file() else None
            description = manifest.get("description") if manifest else None
            version = install.get("version")
            results.append(
                PluginEntity(
                    id=make_entity_id(EntityKind.PLUGIN, f"{full_name}#{scope_name}#{project or ''}"),
                    name=plugin_name,
                    path=install_path,
                    scope=scope,
                    tool=tool,
                    project_path=Path(project) if isinstance(project, str) else None,
                    content=description if isinstance(description, str) else None,
                    plugin_dir=install_path,
                    manifest=manifest,
                    marketplace=marketplace or None,
                    install_scope=scope_name,
                    version=version if isinstance(version, str) else None,
                    **capability_flags(install_path, manifest),
                )
            )
    return results


def plugin_mcp_servers(plugin: PluginEntity, context: EntityContext) -> list[BaseEntity]:
    """Collect MCP servers a plugin provides.

    Reads the plugin's ``.mcp.json`` if present, else an inline
    ``mcpServers`` map (or a path to one) in its manifest.
    """
    if plugin.plugin_dir is None or not plugin.has_mcp:
        return []
    mcp_file = plugin.plugin_dir / PROJECT_MCP_FILE
    parser = McpConfigParser(CLAUDE_SERVERS_KEY, allow_bare=True, plugin_name=plugin.name)
    if mcp_file.is_file():
        return parser.parse(mcp_file, context)

    inline = (plugin.manifest or {}).get("mcpServers")
    if isinstance(inline, dict):
        source = plugin.plugin_dir / PLUGIN_MANIFEST
        return list(servers_from_mapping(inline, source, context, plugin_name=plugin.name))
    if isinstance(inline, str):
        referenced = (plugin.plugin_dir / inline).resolve()
        return parser.parse(referenced, context)
    return []
