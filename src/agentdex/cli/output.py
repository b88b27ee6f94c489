"""Rich output formatting helpers for the agentdex CLI.

Provides consistent terminal output for discovery snapshots, memory-file
states, fix results, and the tool registry.

Config State Color Mapping:
    correct = green, missing_symlink / needs_migration / empty = yellow,
    conflict = bold red
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agentdex.core.consistency import BulkFixReport, ConfigState, ConfigStateType
from agentdex.discovery.models import SNAPSHOT_KEYS, Snapshot
from agentdex.discovery.tool_registry import ToolProfile

_STATE_STYLES: dict[ConfigStateType, str] = {
    ConfigStateType.CORRECT: "green",
    ConfigStateType.MISSING_SYMLINK: "yellow",
    ConfigStateType.NEEDS_MIGRATION: "yellow",
    ConfigStateType.EMPTY: "yellow",
    ConfigStateType.CONFLICT: "bold red",
}

console = Console()


def state_style(state: ConfigStateType) -> str:
    """Return the Rich style string for a config state."""
    return _STATE_STYLES.get(state, "white")


def _short(path: Path | str | None) -> str:
    if path is None:
        return "-"
    return str(path).replace(str(Path.home()), "~", 1)


def _state_text(state: ConfigState | None) -> Text:
    if state is None:
        return Text("-", style="dim")
    return Text(state.state.value, style=state_style(state.state))


def print_snapshot(snapshot: Snapshot) -> None:
    """Print projects, entity totals, duplicates and broken links.

    Args:
        snapshot: Result of one discovery run.
    """
    if snapshot.projects:
        table = Table(title="Projects", show_header=True, header_style="bold")
        table.add_column("Project", style="bold")
        table.add_column("Path", style="dim")
        table.add_column("Tools")
        table.add_column("Entities", justify="right")
        table.add_column("Memory", justify="center")
        for project in snapshot.projects:
            name = "  " * project.depth + project.name
            table.add_row(
                name,
                _short(project.path),
                ", ".join(project.tools) or "-",
                str(project.counts.total),
                _state_text(project.config_state),
            )
        console.print(table)
    else:
        console.print("[dim]No projects found.[/dim]")

    counts = snapshot.counts.to_dict()
    totals = Table(title="Entities", show_header=True, header_style="bold")
    totals.add_column("Kind", style="bold")
    totals.add_column("Count", justify="right")
    for key in SNAPSHOT_KEYS.values():
        totals.add_row(key.replace("_", " "), str(counts[key]))
    console.print(totals)

    if snapshot.duplicates:
        dup_table = Table(title="Name Collisions", show_header=True, header_style="bold")
        dup_table.add_column("Kind")
        dup_table.add_column("Name", style="bold")
        dup_table.add_column("Rank", justify="right")
        dup_table.add_column("Scope")
        dup_table.add_column("Path", style="dim")
        for group in snapshot.duplicates:
            for member in group.members:
                style = "green" if member.is_active else "dim"
                dup_table.add_row(
                    group.kind.value,
                    group.name,
                    Text(str(member.rank), style=style),
                    member.scope.value,
                    _short(member.path),
                )
        console.print(dup_table)

    broken = [s for s in snapshot.symlinks if s.is_broken]
    if broken:
        link_table = Table(title="Broken Symlinks", show_header=True, header_style="bold red")
        link_table.add_column("Link", style="bold")
        link_table.add_column("Target", style="dim")
        link_table.add_column("Kind")
        for info in broken:
            kind = info.entity_kind.value if info.entity_kind else "-"
            link_table.add_row(_short(info.path), info.raw_target or "?", kind)
        console.print(link_table)

    _print_scan_summary(snapshot)


def _print_scan_summary(snapshot: Snapshot) -> None:
    """Print a one-line summary after the snapshot tables."""
    broken = sum(1 for s in snapshot.symlinks if s.is_broken)
    conflicts = sum(
        1 for p in snapshot.projects
        if p.config_state is not None and p.config_state.state is ConfigStateType.CONFLICT
    )
    parts = [
        f"[bold]{len(snapshot.projects)}[/bold] projects",
        f"{snapshot.counts.total} entities",
        f"{len(snapshot.duplicates)} collisions",
    ]
    if broken:
        parts.append(f"[red]{broken} broken symlinks[/red]")
    if conflicts:
        parts.append(f"[red]{conflicts} memory conflicts[/red]")
    console.print(" | ".join(parts))


def print_config_state(state: ConfigState) -> None:
    """Print the memory-file classification of one project."""
    header = Text.assemble(
        ("Project: ", "bold"), (_short(state.project_path), ""),
        ("  State: ", "bold"), _state_text(state),
    )
    console.print(Panel(header, title="Memory Files"))
    console.print(f"  CLAUDE.md: {state.legacy_status.value}")
    if state.legacy_symlink_target:
        console.print(f"             -> {state.legacy_symlink_target}")
    console.print(f"  AGENTS.md: {state.universal_status.value}")
    if state.can_auto_fix and state.state is not ConfigStateType.CORRECT:
        console.print("[yellow]Run `agentdex fix` to repair.[/yellow]")


def print_fix_report(report: BulkFixReport, skipped: Sequence[Path] = ()) -> None:
    """Print per-project fix outcomes, then any projects left untouched."""
    table = Table(title="Fix Results", show_header=True, header_style="bold")
    table.add_column("Project", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Message")
    for outcome in report.outcomes:
        status = Text("OK", style="bold green") if outcome.ok else Text("FAILED", style="bold red")
        table.add_row(_short(outcome.project_path), status, outcome.message)
    console.print(table)
    console.print(f"[green]{report.succeeded} fixed[/green] | [red]{report.failed} failed[/red]")
    if skipped:
        console.print(f"[yellow]{len(skipped)} skipped (conflicting memory files):[/yellow]")
        for path in skipped:
            console.print(f"  {_short(path)}", soft_wrap=True)


def print_tools(profiles: list[ToolProfile]) -> None:
    """Print the known tools and their directory conventions."""
    table = Table(title=f"{len(profiles)} Known Tools", show_header=True, header_style="bold")
    table.add_column("Id", style="bold")
    table.add_column("Name")
    table.add_column("Global Dir", style="dim")
    table.add_column("Project Dir", style="dim")
    table.add_column("Kinds")
    table.add_column("Extracted", justify="center")
    for profile in profiles:
        kinds = ", ".join(k.value for k in profile.kind_dirs)
        extracted = Text("yes", style="green") if profile.structured else Text("-", style="dim")
        table.add_row(
            profile.tool_id,
            profile.name,
            "~/" + profile.global_dir,
            profile.project_dir,
            kinds,
            extracted,
        )
    console.print(table)
