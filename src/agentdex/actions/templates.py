"""Default content for newly created entities.

Agents, skills and commands get a frontmatter block written by
``FrontmatterParser.render`` followed by a short starter body. Memory
files are plain Markdown.
"""

from __future__ import annotations

from agentdex.discovery.tool_registry import OPENCODE
from agentdex.parsers.base import EntityKind
from agentdex.parsers.frontmatter import FRONTMATTER

AGENT_BODY = """You are a specialized agent.

When invoked:
1. Analyze the task
2. Execute appropriate actions
3. Report results
"""

SKILL_BODY = """# {name} Skill

## When to use this skill

Use this skill when...

## Instructions

Follow these steps...
"""

COMMAND_BODY = """# {name} Command

$ARGUMENTS
"""

MEMORY_TEMPLATE = """# Project Memory

## Overview

This file contains project-specific context and instructions for {tool_name}.

## Guidelines

- ...
"""

TEMPLATE_KINDS: frozenset[EntityKind] = frozenset({
    EntityKind.AGENT,
    EntityKind.SKILL,
    EntityKind.COMMAND,
    EntityKind.MEMORY,
})


def agent_template(name: str) -> str:
    metadata = {
        "name": name,
        "description": "A custom agent",
        "tools": ["Read", "Grep", "Glob"],
        "model": "sonnet",
    }
    return FRONTMATTER.render(metadata, AGENT_BODY)


def skill_template(name: str) -> str:
    metadata = {"name": name, "description": "A custom skill"}
    return FRONTMATTER.render(metadata, SKILL_BODY.format(name=name))


def command_template(name: str) -> str:
    metadata = {"description": "A custom command"}
    return FRONTMATTER.render(metadata, COMMAND_BODY.format(name=name))


def memory_template(tool_id: str) -> str:
    tool_name = "OpenCode" if tool_id == OPENCODE else "Claude"
    return MEMORY_TEMPLATE.format(tool_name=tool_name)


def default_content(kind: EntityKind, name: str, tool_id: str) -> str:
    """Return the starter content for a new entity.

    Args:
        kind: One of ``TEMPLATE_KINDS``.
        name: Entity name, substituted into the frontmatter and heading.
        tool_id: Target tool; only affects the memory template.

    Raises:
        KeyError: If ``kind`` has no template.
    """
    if kind is EntityKind.MEMORY:
        return memory_template(tool_id)
    builders = {
        EntityKind.AGENT: agent_template,
        EntityKind.SKILL: skill_template,
        EntityKind.COMMAND: command_template,
    }
    return builders[kind](name)
