"""Shared Click options for commands that run a discovery."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import click

from agentdex.config import DiscoveryConfig, load_config
from agentdex.exceptions import AgentdexError


def discovery_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach ``--root``, ``--max-depth`` and ``--config`` to a command."""
    func = click.option(
        "--config", "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Config file (default: $AGENTDEX_CONFIG or ~/.config/agentdex/config.yaml).",
    )(func)
    func = click.option(
        "--max-depth",
        type=click.IntRange(min=1),
        default=None,
        help="Maximum directory depth of the project walk.",
    )(func)
    func = click.option(
        "--root", "roots",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        multiple=True,
        help="Directory to search for projects (repeatable). Replaces the home walk.",
    )(func)
    return func


def build_config(
    roots: tuple[Path, ...],
    max_depth: int | None,
    config_path: Path | None,
) -> DiscoveryConfig:
    """Load the config file and apply command-line overrides.

    Exits with code 1 on an invalid config file.
    """
    try:
        config = load_config(config_path)
    except AgentdexError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if roots:
        config = config.with_overrides(
            roots=tuple(r.resolve() for r in roots),
            include_home=False,
        )
    return config.with_overrides(max_depth=max_depth)
