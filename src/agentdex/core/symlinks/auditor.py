"""Symlink audit for discovered entities.

Users commonly share one agent or skill between tools or projects by
symlinking it. When the target moves or is deleted the link dangles and
the owning tool silently stops loading it. ``SymlinkAuditor`` resolves
every symlink found during extraction and reports whether its target
exists, attributing each finding to the entity that owns the link.

Candidate links per entity:

- the entity's own path (agent/command/memory files, ``SKILL.md``),
- a skill's directory or a plugin's directory,
- symlinked supporting files inside a skill directory.

Broken links are findings, never scan failures. Each result is a
point-in-time fact; nothing is monitored.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from agentdex.core.symlinks.models import SymlinkInfo
from agentdex.parsers.base import BaseEntity, PluginEntity, SkillEntity

logger = logging.getLogger(__name__)


def resolve_link(path: Path) -> SymlinkInfo | None:
    """Inspect a single path.

    Args:
        path: Path that may be a symlink.

    Returns:
        A ``SymlinkInfo`` if ``path`` is a symlink, else None. Relative
        link text is resolved against the link's parent directory.
    """
    if not path.is_symlink():
        return None
    try:
        raw = os.readlink(path)
    except OSError:
        logger.warning("Cannot read symlink %s", path, exc_info=True)
        return SymlinkInfo(path=path, raw_target=None, target=None, target_exists=False)
    target = Path(os.path.normpath(os.path.join(path.parent, raw)))
    # os.path.exists follows the whole chain, so a link to a dangling link is broken too
    return SymlinkInfo(
        path=path,
        raw_target=raw,
        target=target,
        target_exists=os.path.exists(path),
    )


def _candidate_links(entity: BaseEntity) -> Iterator[Path]:
    if isinstance(entity, SkillEntity) and entity.skill_dir is not None:
        yield entity.skill_dir
        for rel in entity.supporting_files:
            yield entity.skill_dir / rel
    if isinstance(entity, PluginEntity) and entity.plugin_dir is not None:
        yield entity.plugin_dir
    yield entity.path


class SymlinkAuditor:
    """Resolve and audit the symlinks behind a set of entities."""

    def inspect(self, path: Path) -> SymlinkInfo | None:
        """Inspect one path; see ``resolve_link``."""
        return resolve_link(path)

    def audit(self, entities: Iterable[BaseEntity]) -> list[SymlinkInfo]:
        """Audit every symlink owned by ``entities``.

        Each link path is reported once, attributed to the first entity
        that owns it.

        Args:
            entities: Entities in discovery order.

        Returns:
            Findings in discovery order.
        """
        findings: list[SymlinkInfo] = []
        seen: set[Path] = set()
        for entity in entities:
            for candidate in _candidate_links(entity):
                if candidate in seen:
                    continue
                info = resolve_link(candidate)
                if info is None:
                    continue
                seen.add(candidate)
                findings.append(info.attributed_to(entity))

        broken = sum(1 for f in findings if f.is_broken)
        if broken:
            logger.info("Symlink audit: %d of %d links are broken", broken, len(findings))
        return findings
