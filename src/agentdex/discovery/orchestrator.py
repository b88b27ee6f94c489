"""Top-level discovery entry point.

Discovery Algorithm:
    1. ``ProjectScanner`` walks the scan roots once.
    2. One ``ExtractionUnit`` per (tool, scope, kind) for the global scope,
       then per (tool, kind) for every project, in scanner order.
    3. Units run on a bounded thread pool. Results are joined in
       submission order, so the merged entity list is deterministic.
    4. ``DuplicateResolver`` and ``SymlinkAuditor`` run over the complete
       entity set; ``ConfigConsistencyEngine`` classifies each project.
    5. Everything is frozen into one ``Snapshot``.

A failing unit is logged and contributes nothing; the run continues.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType

from agentdex.config import DiscoveryConfig
from agentdex.core.consistency import ConfigConsistencyEngine
from agentdex.core.duplicates import DuplicateResolver
from agentdex.core.symlinks import SymlinkAuditor
from agentdex.discovery.extractor import UNIT_KINDS, EntityExtractor, ExtractionUnit
from agentdex.discovery.models import EntityCounts, Project, Snapshot
from agentdex.discovery.project_scanner import ProjectScanner
from agentdex.discovery.tool_registry import ToolProfile, structured_profiles
from agentdex.exceptions import ConsistencyError, ScanError
from agentdex.parsers.base import BaseEntity, EntityKind, Scope

logger = logging.getLogger(__name__)


class DiscoveryOrchestrator:
    """Runs a full discovery and assembles the snapshot.

    Usage::

        orchestrator = DiscoveryOrchestrator(load_config())
        snapshot = orchestrator.discover()
        for group in snapshot.duplicates:
            print(group.kind.value, group.name, len(group.members))
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        profiles: list[ToolProfile] | None = None,
    ) -> None:
        self.config = config or DiscoveryConfig()
        self.profiles = profiles if profiles is not None else structured_profiles()
        self.scanner = ProjectScanner(self.config, self.profiles)
        self.extractor = EntityExtractor()
        self.resolver = DuplicateResolver()
        self.auditor = SymlinkAuditor()
        self.engine = ConfigConsistencyEngine()

    def build_units(self, projects: list[Project]) -> list[ExtractionUnit]:
        """List every extraction unit: global scope first, then projects."""
        units = [
            ExtractionUnit(profile, Scope.GLOBAL, kind, self.config.home)
            for profile in self.profiles
            for kind in UNIT_KINDS
        ]
        for project in projects:
            units.extend(
                ExtractionUnit(profile, Scope.PROJECT, kind, project.path)
                for profile in self.profiles
                for kind in UNIT_KINDS
            )
        return units

    def _run_unit(self, unit: ExtractionUnit) -> list[BaseEntity]:
        try:
            return self.extractor.extract(unit)
        except Exception:
            logger.warning("Extraction failed for %s", unit.describe(), exc_info=True)
            return []

    def extract_all(self, units: list[ExtractionUnit]) -> list[BaseEntity]:
        """Run units concurrently and merge their results in unit order.

        Entities already seen (same id) are dropped, first one wins.
        """
        workers = max(1, min(self.config.max_workers, len(units) or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._run_unit, unit) for unit in units]
            batches = [future.result() for future in futures]

        merged: list[BaseEntity] = []
        seen: set[str] = set()
        for batch in batches:
            for entity in batch:
                if entity.id in seen:
                    continue
                seen.add(entity.id)
                merged.append(entity)
        return merged

    def _annotate(self, project: Project, entities: list[BaseEntity]) -> Project:
        owned = [e for e in entities if e.project_path == project.path]
        try:
            state = self.engine.get_state(project.path)
        except ConsistencyError:
            logger.warning("Project vanished during scan: %s", project.path)
            state = None
        return replace(project, counts=EntityCounts.from_entities(owned), config_state=state)

    def discover(self, roots: list[Path] | None = None) -> Snapshot:
        """Run a full discovery.

        Args:
            roots: Directories to search for projects. Defaults to the
                config's ``scan_roots()``.

        Returns:
            A new ``Snapshot``.

        Raises:
            ScanError: If no scan root is an existing directory.
        """
        root_list = roots if roots is not None else self.config.scan_roots()
        if root_list and not any(Path(r).expanduser().is_dir() for r in root_list):
            raise ScanError("None of the scan roots exist: " + ", ".join(map(str, root_list)))

        projects = self.scanner.scan(root_list)
        units = self.build_units(projects)
        logger.debug("Running %d extraction units for %d projects", len(units), len(projects))
        entities = self.extract_all(units)

        grouped: dict[EntityKind, list[BaseEntity]] = {kind: [] for kind in EntityKind}
        for entity in entities:
            grouped[entity.kind].append(entity)

        return Snapshot(
            projects=tuple(self._annotate(p, entities) for p in projects),
            entities=MappingProxyType({kind: tuple(items) for kind, items in grouped.items()}),
            duplicates=tuple(self.resolver.resolve(entities)),
            symlinks=tuple(self.auditor.audit(entities)),
            discovered_at=datetime.now(timezone.utc),
        )


def discover(config: DiscoveryConfig | None = None, roots: list[Path] | None = None) -> Snapshot:
    """Convenience wrapper: run one discovery with ``config``."""
    return DiscoveryOrchestrator(config).discover(roots)
