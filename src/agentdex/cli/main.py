"""agentdex CLI -- Discover and reconcile AI coding-assistant configuration.

Entry point for the ``agentdex`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan    -- Discover projects, entities, collisions and broken links.
    state   -- Show a project's CLAUDE.md / AGENTS.md state.
    fix     -- Repair memory files of one, several or all projects.
    tools   -- List the known AI coding tools.
    entity  -- Copy, link, rename, delete, duplicate or create entities.

Usage::

    agentdex scan                          # Walk the home directory
    agentdex scan --root ~/code --format json
    agentdex state ./my-project
    agentdex fix ./my-project
    agentdex fix --all --root ~/code
    agentdex tools
    agentdex entity create agent reviewer --scope global
"""

from __future__ import annotations

import logging

import click

from agentdex import __version__
from agentdex.cli.entity_cmd import entity_group
from agentdex.cli.scan import scan_command
from agentdex.cli.state_cmd import fix_command, state_command
from agentdex.cli.tools_cmd import tools_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """agentdex: Discover and reconcile AI coding-assistant configuration.

    Finds Claude Code and OpenCode settings, memory files, agents, skills,
    commands, hooks, plugins and MCP servers across your projects, shows
    which definitions shadow each other, and keeps CLAUDE.md and AGENTS.md
    in sync.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(state_command)
cli.add_command(fix_command)
cli.add_command(tools_command)
cli.add_command(entity_group)
