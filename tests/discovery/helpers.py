"""Shared test helpers for building fake tool configuration trees.

Each helper creates a minimal but realistic directory structure that
simulates a Claude Code or OpenCode installation (under a fake home) or
a project. Used by the discovery, CLI and action tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def write(path: Path, text: str = "") -> Path:
    """Write ``text`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, data: Any) -> Path:
    return write(path, json.dumps(data, indent=2))


def agent_doc(name: str, description: str = "An agent") -> str:
    return f"---\nname: {name}\ndescription: {description}\ntools: Read, Grep\n---\n\nYou are {name}.\n"


def make_agent(config_dir: Path, name: str, subdir: str = "agents") -> Path:
    """Create ``<config_dir>/<subdir>/<name>.md``."""
    return write(config_dir / subdir / f"{name}.md", agent_doc(name))


def make_skill(config_dir: Path, name: str, subdir: str = "skills", extra: dict[str, str] | None = None) -> Path:
    """Create a skill directory with ``SKILL.md`` and optional extra files."""
    skill_dir = config_dir / subdir / name
    write(skill_dir / "SKILL.md", f"---\nname: {name}\ndescription: Skill {name}\n---\n\n# {name}\n")
    for rel, text in (extra or {}).items():
        write(skill_dir / rel, text)
    return skill_dir


def make_command(config_dir: Path, name: str, namespace: str = "", subdir: str = "commands") -> Path:
    directory = config_dir / subdir
    if namespace:
        directory = directory.joinpath(*namespace.split(":"))
    return write(directory / f"{name}.md", f"---\ndescription: Run {name}\n---\n\nDo {name} $ARGUMENTS\n")


def hooks_settings() -> dict[str, Any]:
    return {
        "hooks": {
            "PreToolUse": [
                {"matcher": "Bash", "hooks": [{"type": "command", "command": "lint.sh", "timeout": 30}]},
                {"matcher": "Edit", "hooks": []},
            ],
            "Stop": [{"hooks": [{"type": "prompt", "prompt": "Summarize"}]}],
        }
    }


def create_claude_home(home: Path) -> Path:
    """Create a fake global Claude Code installation under ``home``."""
    claude = home / ".claude"
    write_json(claude / "settings.json", hooks_settings())
    write(claude / "CLAUDE.md", "# Global memory\n")
    make_agent(claude, "reviewer")
    make_skill(claude, "pdf", extra={"scripts/extract.py": "print('x')\n"})
    make_command(claude, "deploy")
    write_json(home / ".claude.json", {"mcpServers": {"github": {"command": "gh-mcp", "args": ["serve"]}}})
    return claude


def create_opencode_home(home: Path) -> Path:
    """Create a fake global OpenCode installation under ``home``."""
    opencode = home / ".config" / "opencode"
    write(
        opencode / "opencode.jsonc",
        '{\n  // servers\n  "mcp": {"docs": {"type": "remote", "url": "https://docs.example.com/mcp"}}\n}\n',
    )
    write(opencode / "AGENTS.md", "# OpenCode memory\n")
    make_agent(opencode, "planner", subdir="agent")
    return opencode


def create_claude_project(root: Path, name: str, memory: str | None = "# Project\n") -> Path:
    """Create a project with a ``.claude/`` directory and a ``CLAUDE.md``."""
    project = root / name
    claude = project / ".claude"
    claude.mkdir(parents=True)
    write_json(claude / "settings.json", {"permissions": {"allow": ["Bash(ls)"]}})
    if memory is not None:
        write(project / "CLAUDE.md", memory)
    return project


def create_opencode_project(root: Path, name: str) -> Path:
    """Create a project with ``opencode.json`` and ``AGENTS.md`` at its root."""
    project = root / name
    write_json(
        project / "opencode.json",
        {"mcp": {"local-db": {"type": "local", "command": ["db-mcp", "--port", "5432"], "environment": {"X": "1"}}}},
    )
    write(project / "AGENTS.md", "# Agents\n")
    return project
