"""``agentdex scan`` -- Discover projects and configuration entities.

Walks the scan roots, extracts every entity of the structured tools at
global and project scope, and reports projects, entity counts, name
collisions, broken symlinks and memory-file states.

Exit Codes:
    0 -- Discovery succeeded with no problems to report.
    1 -- Broken symlinks or memory-file conflicts were found.
    2 -- Nothing was found (no projects and no entities).
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from agentdex.cli.options import build_config, discovery_options
from agentdex.core.consistency import ConfigStateType
from agentdex.discovery import DiscoveryOrchestrator, Snapshot
from agentdex.exceptions import AgentdexError


def has_findings(snapshot: Snapshot) -> bool:
    """True when the snapshot holds broken links or memory conflicts."""
    if any(info.is_broken for info in snapshot.symlinks):
        return True
    return any(
        p.config_state is not None and p.config_state.state is ConfigStateType.CONFLICT
        for p in snapshot.projects
    )


@click.command("scan")
@discovery_options
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format: table (default) or json.",
)
def scan_command(
    roots: tuple[Path, ...],
    max_depth: int | None,
    config_path: Path | None,
    output_format: str,
) -> None:
    """Discover AI tool configuration across projects.

    Without --root, the home directory is walked for projects. Global
    configuration under the home directory is always included.
    """
    config = build_config(roots, max_depth, config_path)
    try:
        snapshot = DiscoveryOrchestrator(config).discover()
    except AgentdexError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
    else:
        from agentdex.cli.output import print_snapshot
        print_snapshot(snapshot)

    if not snapshot.projects and snapshot.counts.total == 0:
        if output_format == "table":
            click.echo("\nNo AI tool configuration found.")
        sys.exit(2)
    sys.exit(1 if has_findings(snapshot) else 0)
