"""Parser for MCP (Model Context Protocol) server declarations.

MCP servers are declared in several places, each a name -> config map:

- ``~/.claude.json`` -- user-wide Claude Code servers under ``mcpServers``.
- ``<project>/.mcp.json`` -- project servers, either wrapped in
  ``mcpServers`` or as a bare name -> config map.
- OpenCode settings (``opencode.json``/``.jsonc``) under the ``mcp`` key.
  OpenCode spells ``command`` as an array (``[exe, *args]``) and may use
  ``environment`` instead of ``env``.
- Plugins -- a plugin's own ``.mcp.json`` or the ``mcpServers`` key of its
  manifest. These records set ``is_from_plugin``.

.. code-block:: json

    {
      "mcpServers": {
        "filesystem": {
          "command": "npx",
          "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"],
          "env": { "NODE_ENV": "production" }
        },
        "docs": { "type": "sse", "url": "https://example.com/sse" }
      }
    }

Transport Classification
------------------------
``stdio`` when the entry has a command and no URL; ``sse`` or ``http``
when it has a URL (``sse`` only if the explicit ``type`` says so);
``unknown`` otherwise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from agentdex.parsers.base import (
    BaseEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    McpServerConfig,
    McpServerEntity,
    last_modified_ms,
    make_entity_id,
)
from agentdex.parsers.settings import load_json_file

PROJECT_MCP_FILE = ".mcp.json"
USER_CONFIG_FILE = ".claude.json"

CLAUDE_SERVERS_KEY = "mcpServers"
OPENCODE_SERVERS_KEY = "mcp"

TRANSPORT_STDIO = "stdio"
TRANSPORT_HTTP = "http"
TRANSPORT_SSE = "sse"
TRANSPORT_UNKNOWN = "unknown"


def classify_transport(raw: dict[str, Any]) -> str:
    """Classify a raw server entry into a transport name."""
    has_command = bool(raw.get("command"))
    url = raw.get("url")
    if isinstance(url, str) and url:
        return TRANSPORT_SSE if raw.get("type") == TRANSPORT_SSE else TRANSPORT_HTTP
    if has_command:
        return TRANSPORT_STDIO
    return TRANSPORT_UNKNOWN


def _string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if isinstance(v, (str, int, float))}


def normalize_server(raw: dict[str, Any]) -> McpServerConfig:
    """Normalize a Claude- or OpenCode-style entry into ``McpServerConfig``."""
    command = raw.get("command")
    args: list[str] = []
    if isinstance(command, list):
        parts = [str(p) for p in command]
        command = parts[0] if parts else None
        args = parts[1:]
    elif not isinstance(command, str):
        command = None
    if not args and isinstance(raw.get("args"), list):
        args = [str(a) for a in raw["args"]]

    env = raw.get("env") if "env" in raw else raw.get("environment")
    url = raw.get("url")
    server_type = raw.get("type")
    return McpServerConfig(
        type=server_type if isinstance(server_type, str) else None,
        command=command,
        args=tuple(args),
        url=url if isinstance(url, str) else None,
        env=_string_map(env),
        headers=_string_map(raw.get("headers")),
    )


def servers_from_mapping(
    servers: dict[str, Any],
    source: Path,
    context: EntityContext,
    plugin_name: str | None = None,
) -> list[McpServerEntity]:
    """Build MCP entities from a name -> config map.

    Entries whose config is not an object are skipped.

    Args:
        servers: The server map.
        source: File that declares the map.
        context: Tool, scope and owning project.
        plugin_name: Set when the map comes from a plugin.
    """
    mtime = last_modified_ms(source)
    results: list[McpServerEntity] = []
    for name, raw in servers.items():
        if not isinstance(raw, dict):
            continue
        results.append(
            McpServerEntity(
                id=make_entity_id(EntityKind.MCP, f"{source}#{name}"),
                name=name,
                path=source,
                scope=context.scope,
                tool=context.tool,
                project_path=context.project_path,
                last_modified=mtime,
                transport=classify_transport(raw),
                config=normalize_server(raw),
                is_from_plugin=plugin_name is not None,
                plugin_name=plugin_name,
            )
        )
    return results


def server_map(data: dict[str, Any], key: str, allow_bare: bool = False) -> dict[str, Any]:
    """Pick the server map out of a parsed config file.

    Args:
        data: Parsed JSON object.
        key: Wrapper key (``mcpServers`` or ``mcp``).
        allow_bare: Treat the whole object as the map when the wrapper
            key is absent (``.mcp.json`` only).
    """
    wrapped = data.get(key)
    if isinstance(wrapped, dict):
        return wrapped
    if allow_bare and key not in data:
        return {k: v for k, v in data.items() if isinstance(v, dict)}
    return {}


class McpConfigParser(EntityParser):
    """Extract MCP server entities from one declaring file.

    Args:
        key: Wrapper key holding the server map.
        allow_bare: Accept a bare name -> config map.
        plugin_name: Owning plugin, for plugin-provided servers.
    """

    kind = EntityKind.MCP

    def __init__(
        self,
        key: str = CLAUDE_SERVERS_KEY,
        allow_bare: bool = False,
        plugin_name: str | None = None,
    ) -> None:
        self.key = key
        self.allow_bare = allow_bare
        self.plugin_name = plugin_name

    def can_parse(self, path: Path) -> bool:
        return path.is_file()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        data = load_json_file(path)
        if data is None:
            return []
        servers = server_map(data, self.key, self.allow_bare)
        return list(servers_from_mapping(servers, path, context, self.plugin_name))


def unify_servers(batches: Iterable[list[BaseEntity]]) -> list[BaseEntity]:
    """Merge MCP batches into one record per server name.

    The first declaration of a name wins; later ones are dropped.
    """
    seen: set[str] = set()
    merged: list[BaseEntity] = []
    for batch in batches:
        for server in batch:
            if server.name in seen:
                continue
            seen.add(server.name)
            merged.append(server)
    return merged
