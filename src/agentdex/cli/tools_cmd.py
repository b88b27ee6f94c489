"""``agentdex tools`` -- List the known AI coding tools.

Prints each tool's id, global and project config directories, and the
entity kinds it has a directory convention for. Only tools marked as
extracted are parsed during ``scan``; the rest are targets for the
``entity`` commands.

Exit Codes:
    0 -- Always (informational command, cannot fail).
"""

from __future__ import annotations

import json

import click

from agentdex.discovery.tool_registry import TOOL_PROFILES


def tools_to_json() -> list[dict]:
    """Serialize every profile to a JSON-compatible dict."""
    return [
        {
            "id": p.tool_id,
            "name": p.name,
            "global_dir": p.global_dir,
            "project_dir": p.project_dir,
            "kinds": {k.value: d for k, d in p.kind_dirs.items()},
            "memory_file": p.memory_file,
            "structured": p.structured,
        }
        for p in TOOL_PROFILES
    ]


@click.command("tools")
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format: table (default) or json.",
)
@click.option(
    "--structured-only",
    is_flag=True,
    default=False,
    help="Only list tools whose configuration is extracted by scan.",
)
def tools_command(output_format: str, structured_only: bool) -> None:
    """List known AI coding tools and their directory conventions."""
    profiles = [p for p in TOOL_PROFILES if p.structured or not structured_only]
    if output_format == "json":
        data = [t for t in tools_to_json() if t["structured"] or not structured_only]
        click.echo(json.dumps(data, indent=2))
        return
    from agentdex.cli.output import print_tools
    print_tools(profiles)
