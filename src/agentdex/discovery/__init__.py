"""Discovery of AI coding tool configuration across projects.

Walks the scan roots for project directories, extracts every
configuration entity of the structured tools (Claude Code, OpenCode) at
global and project scope, and assembles an immutable ``Snapshot``.

Public API::

    from agentdex.discovery import DiscoveryOrchestrator

    snapshot = DiscoveryOrchestrator().discover()
    for project in snapshot.projects:
        print(f"{project.name}: {project.counts.total} entities")
"""

from __future__ import annotations

from agentdex.discovery.extractor import UNIT_KINDS, EntityExtractor, ExtractionUnit
from agentdex.discovery.models import SNAPSHOT_KEYS, EntityCounts, Project, Snapshot
from agentdex.discovery.orchestrator import DiscoveryOrchestrator, discover
from agentdex.discovery.project_scanner import ProjectScanner
from agentdex.discovery.tool_registry import (
    TOOL_PROFILES,
    ToolProfile,
    get_profile,
    structured_profiles,
)

__all__ = [
    "DiscoveryOrchestrator",
    "EntityCounts",
    "EntityExtractor",
    "ExtractionUnit",
    "Project",
    "ProjectScanner",
    "SNAPSHOT_KEYS",
    "Snapshot",
    "TOOL_PROFILES",
    "ToolProfile",
    "UNIT_KINDS",
    "discover",
    "get_profile",
    "structured_profiles",
]
