"""Entity parsers for agentdex.

Each parser turns one resolved location (a settings file, a memory file,
an agents/skills/commands/plugins directory, an MCP declaration file)
into typed entity records. Parsers never raise for a single unreadable
or malformed file; they degrade that entity and keep going.
"""

from __future__ import annotations

from agentdex.parsers.base import (
    ENTITY_TYPES,
    AgentEntity,
    BaseEntity,
    CommandEntity,
    Entity,
    EntityContext,
    EntityKind,
    EntityParser,
    HookDefinition,
    HookEntity,
    McpServerConfig,
    McpServerEntity,
    MemoryEntity,
    PluginEntity,
    Scope,
    SettingsEntity,
    SkillEntity,
)
from agentdex.parsers.frontmatter import FrontmatterParser

__all__ = [
    "ENTITY_TYPES",
    "AgentEntity",
    "BaseEntity",
    "CommandEntity",
    "Entity",
    "EntityContext",
    "EntityKind",
    "EntityParser",
    "FrontmatterParser",
    "HookDefinition",
    "HookEntity",
    "McpServerConfig",
    "McpServerEntity",
    "MemoryEntity",
    "PluginEntity",
    "Scope",
    "SettingsEntity",
    "SkillEntity",
]
