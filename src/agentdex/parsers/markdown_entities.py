"""Parsers for Markdown-backed entities: agents, skills and commands.

Layouts (directory names come from the tool's path conventions):

- Agents: ``<agents>/<name>.md``, one file per agent.
- Skills: ``<skills>/<name>/SKILL.md`` plus any supporting files inside
  the skill directory.
- Commands: ``<commands>/<ns>/.../<name>.md``. Directories between the
  command root and the file form the namespace (``frontend:component``);
  top-level commands have none.

Every document goes through ``FrontmatterParser``. Symlinked entries are
reported with their link text, including dangling ones, whose content is
None.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from agentdex.parsers.base import (
    AgentEntity,
    BaseEntity,
    CommandEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    SkillEntity,
    read_text,
    symlink_target,
)
from agentdex.parsers.frontmatter import FRONTMATTER

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
MARKDOWN_SUFFIX = ".md"
NAMESPACE_SEPARATOR = ":"


def _sorted_entries(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        logger.warning("Cannot list %s", directory, exc_info=True)
        return []


def _read_document(path: Path) -> tuple[str | None, dict | None, str]:
    content = read_text(path)
    if content is None:
        return None, None, ""
    frontmatter, body = FRONTMATTER.parse(content)
    return content, frontmatter, body


class AgentParser(EntityParser):
    """Parse every ``*.md`` file directly inside an agents directory."""

    kind = EntityKind.AGENT

    def can_parse(self, path: Path) -> bool:
        return path.is_dir()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        results: list[BaseEntity] = []
        for entry in _sorted_entries(path):
            if entry.suffix != MARKDOWN_SUFFIX or entry.is_dir():
                continue
            content, frontmatter, body = _read_document(entry)
            results.append(
                AgentEntity(
                    **context.base_fields(self.kind, entry.stem, entry),
                    content=content,
                    frontmatter=frontmatter,
                    body=body,
                )
            )
        return results


def _supporting_files(skill_dir: Path) -> tuple[str, ...]:
    """Relative paths of everything in a skill directory but ``SKILL.md``.

    Symlinked subdirectories are listed but not descended into.
    """
    found: list[str] = []
    for root, dirnames, filenames in os.walk(skill_dir, followlinks=False):
        root_path = Path(root)
        for name in filenames:
            rel = (root_path / name).relative_to(skill_dir).as_posix()
            if rel != SKILL_FILE:
                found.append(rel)
        for name in dirnames:
            if (root_path / name).is_symlink():
                found.append((root_path / name).relative_to(skill_dir).as_posix())
    return tuple(sorted(found))


class SkillParser(EntityParser):
    """Parse every skill directory (one holding ``SKILL.md``) in a skills root.

    A skill whose directory is a dangling symlink is still reported so
    the symlink audit can flag it.
    """

    kind = EntityKind.SKILL

    def can_parse(self, path: Path) -> bool:
        return path.is_dir()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        results: list[BaseEntity] = []
        for skill_dir in _sorted_entries(path):
            skill = self._parse_skill(skill_dir, context)
            if skill is not None:
                results.append(skill)
        return results

    def _parse_skill(self, skill_dir: Path, context: EntityContext) -> SkillEntity | None:
        dir_is_link, dir_target = symlink_target(skill_dir)
        dangling = dir_is_link and not skill_dir.exists()
        skill_file = skill_dir / SKILL_FILE
        if not dangling and not (skill_dir.is_dir() and os.path.lexists(skill_file)):
            return None

        fields = context.base_fields(self.kind, skill_dir.name, skill_file)
        if dir_is_link:
            fields["is_symlink"] = True
            fields["symlink_target"] = dir_target
        if dangling:
            return SkillEntity(**fields, skill_dir=skill_dir)

        content, frontmatter, body = _read_document(skill_file)
        return SkillEntity(
            **fields,
            content=content,
            skill_dir=skill_dir,
            frontmatter=frontmatter,
            body=body,
            supporting_files=_supporting_files(skill_dir),
        )


class CommandParser(EntityParser):
    """Parse a commands directory tree, deriving namespaces from subdirectories."""

    kind = EntityKind.COMMAND

    def can_parse(self, path: Path) -> bool:
        return path.is_dir()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        results: list[BaseEntity] = []
        # Explicit stack; symlinked subdirectories are not followed.
        stack: list[tuple[Path, tuple[str, ...]]] = [(path, ())]
        while stack:
            directory, namespace = stack.pop()
            subdirs: list[tuple[Path, tuple[str, ...]]] = []
            for entry in _sorted_entries(directory):
                if entry.is_dir() and not entry.is_symlink():
                    subdirs.append((entry, namespace + (entry.name,)))
                elif entry.suffix == MARKDOWN_SUFFIX and not entry.is_dir():
                    results.append(self._parse_command(entry, namespace, context))
            stack.extend(reversed(subdirs))
        return results

    def _parse_command(
        self, path: Path, namespace: tuple[str, ...], context: EntityContext
    ) -> CommandEntity:
        content, frontmatter, body = _read_document(path)
        return CommandEntity(
            **context.base_fields(self.kind, path.stem, path),
            content=content,
            namespace=NAMESPACE_SEPARATOR.join(namespace) or None,
            frontmatter=frontmatter,
            body=body,
        )
