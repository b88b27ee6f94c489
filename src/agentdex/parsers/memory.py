"""Parser for memory (instructions) files.

Two conventions compete for a project's persistent instructions:

- ``CLAUDE.md`` -- the legacy file read only by Claude Code.
- ``AGENTS.md`` -- the universal file read by OpenCode and most other
  assistants.

Both may sit at a project root or inside a tool's config directory.
Content is stored raw; memory files have no metadata block.
"""

from __future__ import annotations

import os
from pathlib import Path

from agentdex.parsers.base import (
    BaseEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    MemoryEntity,
    read_text,
)

LEGACY_MEMORY_FILE = "CLAUDE.md"
UNIVERSAL_MEMORY_FILE = "AGENTS.md"

VARIANT_ROOT = "root"
VARIANT_CONFIG_DIR = "config_dir"


class MemoryParser(EntityParser):
    """Materialize one memory file as a ``MemoryEntity``.

    Args:
        variant: ``"root"`` for a file at a base directory, or
            ``"config_dir"`` for one inside a tool's config directory.
    """

    kind = EntityKind.MEMORY

    def __init__(self, variant: str = VARIANT_ROOT) -> None:
        self.variant = variant

    def can_parse(self, path: Path) -> bool:
        # lexists: a dangling memory symlink is still an entity
        return os.path.lexists(path) and not path.is_dir()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        return [
            MemoryEntity(
                **context.base_fields(self.kind, path.name, path),
                content=read_text(path),
                variant=self.variant,
            )
        ]
