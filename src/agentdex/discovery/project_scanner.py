"""Project discovery: find directories that hold AI tool configuration.

A directory is a project root if it contains any marker of a structured
tool: its config directory (``.claude/``, ``.opencode/``), a project
settings file at the root (``opencode.json``), the project MCP file
(``.mcp.json``), or either memory file (``CLAUDE.md``, ``AGENTS.md``).

Walk Algorithm:
    1. Each root is walked depth-first with an explicit stack, children
       visited in name order, so output order is deterministic.
    2. A directory is only descended into while its depth below the root
       is under ``max_depth``.
    3. Pruned: hidden directories (tool config directories are inspected
       as markers, never walked), names in ``skip_dirs``, and symlinked
       directories.
    4. Project roots are recorded, and the walk continues beneath them to
       find nested projects, which carry ``depth`` and ``parent_path``.
    5. The home directory is walked but never reported: its tool
       directories are the global scope.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from agentdex.config import DiscoveryConfig
from agentdex.discovery.models import Project
from agentdex.discovery.tool_registry import ToolProfile, structured_profiles
from agentdex.parsers.memory import LEGACY_MEMORY_FILE, UNIVERSAL_MEMORY_FILE

logger = logging.getLogger(__name__)


class ProjectScanner:
    """Walks scan roots to find project directories.

    Usage::

        scanner = ProjectScanner(DiscoveryConfig(roots=(Path("~/code"),)))
        for project in scanner.scan():
            print(project.path, project.tools)
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        profiles: list[ToolProfile] | None = None,
    ) -> None:
        self.config = config or DiscoveryConfig()
        self.profiles = profiles if profiles is not None else structured_profiles()
        self._home = self._canonical(self.config.home)

    @staticmethod
    def _canonical(path: Path) -> Path:
        return Path(os.path.realpath(path.expanduser()))

    # -- Prune predicates ---------------------------------------------------

    def should_descend(self, path: Path) -> bool:
        """Return True if the walk may enter the directory ``path``."""
        name = path.name
        if name.startswith(".") or name in self.config.skip_dirs:
            return False
        if path.is_symlink():
            return False
        return path.is_dir()

    def detect(self, directory: Path, depth: int = 0, parent: Path | None = None) -> Project | None:
        """Build a ``Project`` if ``directory`` holds any marker.

        Args:
            directory: Canonical directory to inspect.
            depth: Nesting depth to record.
            parent: Enclosing project to record.
        """
        tools: list[str] = []
        markers: list[str] = []
        for profile in self.profiles:
            if (directory / profile.project_dir).is_dir():
                tools.append(profile.tool_id)
                markers.append(profile.project_dir)
            for marker in profile.marker_files:
                if os.path.lexists(directory / marker) and marker not in markers:
                    markers.append(marker)
        if not markers:
            return None
        mcp_files = {p.project_mcp_file for p in self.profiles if p.project_mcp_file}
        return Project(
            path=directory,
            name=directory.name,
            tools=tuple(tools),
            has_legacy_memory=os.path.lexists(directory / LEGACY_MEMORY_FILE),
            has_universal_memory=os.path.lexists(directory / UNIVERSAL_MEMORY_FILE),
            has_mcp_config=any((directory / f).is_file() for f in mcp_files),
            markers=tuple(markers),
            depth=depth,
            parent_path=parent,
        )

    # -- Walk ---------------------------------------------------------------

    def _children(self, directory: Path) -> list[Path]:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError:
            logger.warning("Cannot list %s", directory)
            return []
        return [child for child in entries if self.should_descend(child)]

    def scan(self, roots: Iterable[Path] | None = None) -> list[Project]:
        """Discover projects beneath every root.

        Args:
            roots: Directories to walk. Defaults to the config's
                ``scan_roots()``.

        Returns:
            Projects in walk order, each reported once even when roots
            overlap.
        """
        root_list = list(roots) if roots is not None else self.config.scan_roots()
        projects: list[Project] = []
        visited: set[Path] = set()

        for root in root_list:
            start = self._canonical(root)
            if not start.is_dir():
                logger.warning("Scan root is not a directory: %s", root)
                continue
            # (directory, walk depth, enclosing project, nesting depth)
            stack: list[tuple[Path, int, Path | None, int]] = [(start, 0, None, 0)]
            while stack:
                directory, depth, parent, nesting = stack.pop()
                if directory in visited:
                    continue
                visited.add(directory)

                child_parent, child_nesting = parent, nesting
                if directory != self._home:
                    project = self.detect(directory, depth=nesting, parent=parent)
                    if project is not None:
                        projects.append(project)
                        child_parent, child_nesting = directory, nesting + 1

                if depth >= self.config.max_depth:
                    continue
                children = self._children(directory)
                for child in reversed(children):
                    stack.append((child, depth + 1, child_parent, child_nesting))

        logger.debug("Found %d projects under %d roots", len(projects), len(root_list))
        return projects
