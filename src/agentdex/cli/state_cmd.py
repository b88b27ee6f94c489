"""``agentdex state`` and ``agentdex fix`` -- Inspect and repair memory files.

``state`` classifies a project's ``CLAUDE.md`` / ``AGENTS.md`` pair.
``fix`` brings one or more projects to the canonical layout: content in
``AGENTS.md`` and ``CLAUDE.md`` a symlink to it.

Exit Codes:
    state: 0 if the layout is correct, 1 otherwise.
    fix:   0 if every attempted project was fixed (or already correct),
           1 if any fix failed, 2 if ``--all`` found no projects.
           ``--all`` skips conflicting projects instead of failing on them.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from agentdex.cli.options import build_config, discovery_options
from agentdex.core.consistency import ConfigConsistencyEngine, ConfigStateType
from agentdex.discovery import DiscoveryOrchestrator
from agentdex.exceptions import AgentdexError

_PROJECT_PATH = click.Path(exists=True, file_okay=False, path_type=Path)


@click.command("state")
@click.argument("project", type=_PROJECT_PATH)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def state_command(project: Path, output_format: str) -> None:
    """Show the memory-file state of PROJECT."""
    try:
        state = ConfigConsistencyEngine().get_state(project.resolve())
    except AgentdexError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(state.to_dict(), indent=2))
    else:
        from agentdex.cli.output import print_config_state
        print_config_state(state)
    sys.exit(0 if state.state is ConfigStateType.CORRECT else 1)


@click.command("fix")
@click.argument("projects", type=_PROJECT_PATH, nargs=-1)
@click.option(
    "--all", "fix_all",
    is_flag=True,
    default=False,
    help="Fix every discovered project instead of the given ones.",
)
@discovery_options
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def fix_command(
    projects: tuple[Path, ...],
    fix_all: bool,
    roots: tuple[Path, ...],
    max_depth: int | None,
    config_path: Path | None,
    output_format: str,
) -> None:
    """Repair the memory files of PROJECTS (or all projects with --all).

    Projects that cannot be fixed automatically are reported and skipped;
    the remaining projects are still processed. With --all, projects whose
    memory files conflict are listed as skipped and not attempted.
    """
    skipped: list[Path] = []
    if fix_all:
        config = build_config(roots, max_depth, config_path)
        try:
            snapshot = DiscoveryOrchestrator(config).discover()
        except AgentdexError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)
        if not snapshot.projects:
            click.echo("No projects found.", err=True)
            sys.exit(2)
        targets: list[Path] = []
        for project in snapshot.projects:
            state = project.config_state
            if state is None:
                targets.append(project.path)
            elif not state.can_auto_fix:
                skipped.append(project.path)
            elif state.state is not ConfigStateType.CORRECT:
                targets.append(project.path)
    elif projects:
        targets = [p.resolve() for p in projects]
    else:
        click.echo("Error: give at least one PROJECT or --all.", err=True)
        sys.exit(1)

    report = ConfigConsistencyEngine().fix_many(targets)

    if output_format == "json":
        data = report.to_dict()
        data["skipped"] = [str(p) for p in skipped]
        click.echo(json.dumps(data, indent=2))
    else:
        from agentdex.cli.output import print_fix_report
        print_fix_report(report, skipped)
    sys.exit(1 if report.failed else 0)
