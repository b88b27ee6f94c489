"""Static registry of AI coding tools and their path conventions.

Each ``ToolProfile`` describes where one tool keeps its configuration:
the config directory under ``$HOME`` (global scope) and under a project
directory (project scope), and the per-kind subdirectory names inside
it. Tools disagree on details -- Claude Code uses plural ``agents/``,
``skills/`` and ``commands/`` directories while OpenCode uses the
singular ``agent/``, ``skill/`` and ``command/`` -- so every lookup goes
through this table rather than hard-coding a path.

Only Claude Code and OpenCode carry full (``structured``) conventions.
The remaining 39 tools are stubs that only know where skills live; they
are valid targets for copy/link/create operations but are not extracted
during discovery.

Memory files:
    ``CLAUDE.md`` is the legacy, Claude-specific memory file.
    ``AGENTS.md`` is the universal memory file read by OpenCode and most
    other tools. The consistency engine reconciles the two.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from agentdex.parsers.base import EntityKind, Scope
from agentdex.parsers.mcp_config import OPENCODE_SERVERS_KEY, PROJECT_MCP_FILE, USER_CONFIG_FILE
from agentdex.parsers.memory import LEGACY_MEMORY_FILE, UNIVERSAL_MEMORY_FILE
from agentdex.parsers.plugins import INSTALLED_PLUGINS_FILE

CLAUDE = "claude"
OPENCODE = "opencode"


@dataclass(frozen=True)
class ToolProfile:
    """Describes where one AI coding tool stores its configuration.

    Attributes:
        tool_id: Machine identifier carried on every entity (e.g. "claude").
        name: Human-readable display name (e.g. "Claude Code").
        global_dir: Config directory, relative to the home directory.
        project_dir: Config directory, relative to a project root.
        kind_dirs: Subdirectory name per directory-backed entity kind.
        settings_files: Settings filenames inside the config directory.
        local_settings_file: Project-only local overrides file, if any.
        root_settings: Whether project settings may also sit at the
            project root (OpenCode's ``opencode.json``).
        memory_file: Memory filename this tool reads.
        home_memory: Whether the memory file is also read from the home
            directory itself (global scope).
        marker_files: Files at a project root that mark a project.
        user_mcp_file: Home-relative file declaring user MCP servers.
        project_mcp_file: Project-root file declaring project MCP servers.
        settings_mcp_key: Settings key holding MCP servers, if any.
        installed_plugins_file: Marketplace index inside the plugins
            directory (global scope only).
        structured: True when discovery extracts this tool's entities.
    """

    tool_id: str
    name: str
    global_dir: str
    project_dir: str
    kind_dirs: dict[EntityKind, str] = field(default_factory=dict)
    settings_files: tuple[str, ...] = ()
    local_settings_file: str | None = None
    root_settings: bool = False
    memory_file: str | None = None
    home_memory: bool = False
    marker_files: tuple[str, ...] = ()
    user_mcp_file: str | None = None
    project_mcp_file: str | None = None
    settings_mcp_key: str | None = None
    installed_plugins_file: str | None = None
    structured: bool = False

    def config_dir(self, scope: Scope, base: Path) -> Path:
        """Resolve the config directory for a scope.

        Args:
            scope: Global or project scope.
            base: The home directory (global) or project root (project).
        """
        rel = self.global_dir if scope is Scope.GLOBAL else self.project_dir
        return base / rel

    def kind_dir(self, kind: EntityKind, scope: Scope, base: Path) -> Path | None:
        """Resolve the directory holding entities of ``kind``, if any."""
        sub = self.kind_dirs.get(kind)
        if sub is None:
            return None
        return self.config_dir(scope, base) / sub

    def supports(self, kind: EntityKind) -> bool:
        """Return True if this tool has a directory convention for ``kind``."""
        return kind in self.kind_dirs


def _stub(tool_id: str, name: str, dot_dir: str, global_dir: str | None = None) -> ToolProfile:
    """Build a skills-only profile for a tool without structured parsing."""
    return ToolProfile(
        tool_id=tool_id,
        name=name,
        global_dir=global_dir or dot_dir,
        project_dir=dot_dir,
        kind_dirs={EntityKind.SKILL: "skills"},
        memory_file=UNIVERSAL_MEMORY_FILE,
    )


def _build_profiles() -> list[ToolProfile]:
    """Build the complete list of known tool profiles.

    Returns:
        Ordered list of 41 profiles, structured tools first.
    """
    return [
        # -- Structured tools --
        ToolProfile(
            tool_id=CLAUDE,
            name="Claude Code",
            global_dir=".claude",
            project_dir=".claude",
            kind_dirs={
                EntityKind.AGENT: "agents",
                EntityKind.SKILL: "skills",
                EntityKind.COMMAND: "commands",
                EntityKind.PLUGIN: "plugins",
            },
            settings_files=("settings.json",),
            local_settings_file="settings.local.json",
            memory_file=LEGACY_MEMORY_FILE,
            marker_files=(LEGACY_MEMORY_FILE, PROJECT_MCP_FILE),
            user_mcp_file=USER_CONFIG_FILE,
            project_mcp_file=PROJECT_MCP_FILE,
            installed_plugins_file=INSTALLED_PLUGINS_FILE,
            structured=True,
        ),
        ToolProfile(
            tool_id=OPENCODE,
            name="OpenCode",
            global_dir=".config/opencode",
            project_dir=".opencode",
            kind_dirs={
                EntityKind.AGENT: "agent",
                EntityKind.SKILL: "skill",
                EntityKind.COMMAND: "command",
            },
            settings_files=("opencode.json", "opencode.jsonc"),
            root_settings=True,
            memory_file=UNIVERSAL_MEMORY_FILE,
            home_memory=True,
            marker_files=(UNIVERSAL_MEMORY_FILE, "opencode.json", "opencode.jsonc"),
            settings_mcp_key=OPENCODE_SERVERS_KEY,
            structured=True,
        ),
        # -- Skills-only stubs --
        _stub("cursor", "Cursor", ".cursor"),
        _stub("cline", "Cline", ".cline"),
        _stub("windsurf", "Windsurf", ".windsurf"),
        _stub("roo-code", "Roo Code", ".roo-code"),
        _stub("codex", "Codex", ".codex"),
        _stub("amp", "Amp", ".amp"),
        _stub("zed", "Zed", ".zed"),
        _stub("void", "Void", ".void"),
        _stub("aider", "Aider", ".aider"),
        _stub("pear-ai", "Pear AI", ".pearai"),
        _stub("continue", "Continue", ".continue"),
        _stub("copilot", "GitHub Copilot", ".copilot"),
        _stub("supermaven", "Supermaven", ".supermaven"),
        _stub("tabnine", "Tabnine", ".tabnine"),
        _stub("sourcegraph", "Sourcegraph", ".sourcegraph"),
        _stub("replit", "Replit", ".replit"),
        _stub("bolt", "Bolt", ".bolt"),
        _stub("v0", "v0", ".v0"),
        _stub("lovable", "Lovable", ".lovable"),
        _stub("devin", "Devin", ".devin"),
        _stub("goose", "Goose", ".goose"),
        _stub("aide", "Aide", ".aide"),
        _stub("trae", "Trae", ".trae"),
        _stub("melty", "Melty", ".melty"),
        _stub("cody-ai", "Cody AI", ".cody"),
        _stub("blackbox", "Blackbox", ".blackbox"),
        _stub("codeium", "Codeium", ".codeium"),
        _stub("qodo", "Qodo", ".qodo"),
        _stub("coderabbit", "CodeRabbit", ".coderabbit"),
        _stub("codium", "Codium", ".codium"),
        _stub("sourcery", "Sourcery", ".sourcery"),
        _stub("amazon-q", "Amazon Q", ".amazonq"),
        _stub("gemini-code", "Gemini Code", ".gemini"),
        _stub("jetbrains-ai", "JetBrains AI", ".jetbrains-ai"),
        _stub("xcode-ai", "Xcode AI", ".xcode-ai"),
        _stub("pieces", "Pieces", ".pieces"),
        _stub("mintlify", "Mintlify", ".mintlify"),
        _stub("swimm", "Swimm", ".swimm"),
        _stub("sweep", "Sweep", ".sweep"),
    ]


# Module-level constant: the canonical list of all known tool profiles.
TOOL_PROFILES: list[ToolProfile] = _build_profiles()

_BY_ID: dict[str, ToolProfile] = {p.tool_id: p for p in TOOL_PROFILES}


def get_profile(tool_id: str) -> ToolProfile | None:
    """Look up a profile by its ``tool_id``."""
    return _BY_ID.get(tool_id)


def structured_profiles() -> list[ToolProfile]:
    """Return the profiles whose entities are extracted during discovery."""
    return [p for p in TOOL_PROFILES if p.structured]


def marker_dir_names() -> frozenset[str]:
    """Project config directory names of the structured tools."""
    return frozenset(p.project_dir for p in structured_profiles())
