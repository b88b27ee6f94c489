"""``agentdex entity <action>`` -- Copy, link, rename, delete, duplicate, create.

Each action performs one filesystem change and prints the resulting
path. Failures print the error message and exit with code 1.

Usage::

    agentdex entity copy .claude/agents/reviewer.md --kind agent --scope global
    agentdex entity link ~/.claude/skills/pdf/SKILL.md --kind skill \\
        --scope project --project . --tool opencode
    agentdex entity rename .claude/commands/old.md new --kind command
    agentdex entity delete .claude/skills/pdf --kind skill --yes
    agentdex entity duplicate .claude/agents/reviewer.md --kind agent
    agentdex entity create skill pdf --scope project --project .
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import click

from agentdex.actions import (
    TEMPLATE_KINDS,
    TRANSFERABLE_KINDS,
    copy_entity,
    create_entity,
    create_entity_symlink,
    delete_entity,
    duplicate_entity,
    rename_entity,
)
from agentdex.discovery.tool_registry import CLAUDE, TOOL_PROFILES
from agentdex.exceptions import AgentdexError
from agentdex.parsers.base import EntityKind, Scope

_TOOL_IDS = [p.tool_id for p in TOOL_PROFILES]
_ALL_KINDS = [k.value for k in EntityKind]
_SOURCE = click.Path(exists=False, path_type=Path)


def _choices(kinds: frozenset[EntityKind]) -> list[str]:
    return sorted(k.value for k in kinds)


def _run(action: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a mutation, turning ``AgentdexError`` into exit code 1."""
    try:
        return action(*args, **kwargs)
    except AgentdexError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _scope_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--tool",
        type=click.Choice(_TOOL_IDS),
        default=CLAUDE,
        show_default=True,
        help="Tool whose directory convention is used.",
    )(func)
    func = click.option(
        "--project",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=None,
        help="Project root (required for project scope).",
    )(func)
    func = click.option(
        "--scope",
        type=click.Choice([s.value for s in Scope]),
        required=True,
        help="Target scope.",
    )(func)
    return func


@click.group("entity")
def entity_group() -> None:
    """Create and manage agents, skills, commands and memory files."""


@entity_group.command("copy")
@click.argument("source", type=_SOURCE)
@click.option("--kind", type=click.Choice(_choices(TRANSFERABLE_KINDS)), required=True)
@_scope_options
@click.option("--name", "new_name", default=None, help="Name for the copy.")
def copy_command(
    source: Path, kind: str, scope: str, project: Path | None, tool: str, new_name: str | None,
) -> None:
    """Copy SOURCE into another scope or tool."""
    path = _run(
        copy_entity, source, EntityKind(kind), Scope(scope),
        project=project, new_name=new_name, tool=tool,
    )
    click.echo(str(path))


@entity_group.command("link")
@click.argument("source", type=_SOURCE)
@click.option("--kind", type=click.Choice(_choices(TRANSFERABLE_KINDS)), required=True)
@_scope_options
def link_command(source: Path, kind: str, scope: str, project: Path | None, tool: str) -> None:
    """Symlink SOURCE into another scope or tool."""
    path = _run(
        create_entity_symlink, source, EntityKind(kind), Scope(scope),
        project=project, tool=tool,
    )
    click.echo(str(path))


@entity_group.command("rename")
@click.argument("source", type=_SOURCE)
@click.argument("new_name")
@click.option("--kind", type=click.Choice(_ALL_KINDS), required=True)
def rename_command(source: Path, new_name: str, kind: str) -> None:
    """Rename SOURCE to NEW_NAME within its directory."""
    click.echo(str(_run(rename_entity, source, new_name, EntityKind(kind))))


@entity_group.command("delete")
@click.argument("path", type=_SOURCE)
@click.option("--kind", type=click.Choice(_ALL_KINDS), required=True)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_command(path: Path, kind: str, yes: bool) -> None:
    """Delete the entity at PATH (symlinks are unlinked, not followed)."""
    if not yes:
        click.confirm(f"Delete {path}?", abort=True)
    removed = _run(delete_entity, path, EntityKind(kind))
    click.echo(f"Deleted {removed}")


@entity_group.command("duplicate")
@click.argument("source", type=_SOURCE)
@click.option("--kind", type=click.Choice(_ALL_KINDS), required=True)
def duplicate_command(source: Path, kind: str) -> None:
    """Copy SOURCE next to itself under a free ``-copy`` name."""
    click.echo(str(_run(duplicate_entity, source, EntityKind(kind))))


@entity_group.command("create")
@click.argument("kind", type=click.Choice(_choices(TEMPLATE_KINDS)))
@click.argument("name")
@_scope_options
@click.option(
    "--content-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Use this file's content instead of the default template.",
)
def create_command(
    kind: str, name: str, scope: str, project: Path | None, tool: str, content_file: Path | None,
) -> None:
    """Create a new KIND entity called NAME from a template."""
    content = content_file.read_text(encoding="utf-8") if content_file else None
    path = _run(
        create_entity, EntityKind(kind), name, Scope(scope),
        project=project, content=content, tool=tool,
    )
    click.echo(str(path))
