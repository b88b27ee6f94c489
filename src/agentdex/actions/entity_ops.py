"""Write operations on entities: copy, link, rename, delete, duplicate, create.

Every operation takes explicit paths and names, performs one filesystem
change, and returns the resulting ``Path``. Failures raise a
``MutationError`` subclass; nothing is retried or rolled back.

Target directories come from the tool's ``ToolProfile``, so the same
call places a Claude agent in ``.claude/agents/`` and an OpenCode agent
in ``.opencode/agent/``. Skills are directory-backed: their source may be
given as the ``SKILL.md`` path or the skill directory, and copy, link,
rename, delete and duplicate act on the whole directory.
"""

from __future__ import annotations

import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from agentdex.actions.templates import TEMPLATE_KINDS, default_content
from agentdex.discovery.tool_registry import CLAUDE, ToolProfile, get_profile
from agentdex.exceptions import (
    EntityNotFoundError,
    InvalidNameError,
    MutationError,
    TargetExistsError,
)
from agentdex.parsers.base import EntityKind, Scope
from agentdex.parsers.markdown_entities import MARKDOWN_SUFFIX, SKILL_FILE

logger = logging.getLogger(__name__)

# Kinds that can be copied or linked between scopes.
TRANSFERABLE_KINDS: frozenset[EntityKind] = frozenset({
    EntityKind.AGENT,
    EntityKind.SKILL,
    EntityKind.COMMAND,
})

MAX_DUPLICATE_ATTEMPTS = 100


@contextmanager
def _wrap_os_errors(action: str) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise MutationError(f"Failed to {action}: {exc}") from exc


def validate_name(name: str) -> str:
    """Check that ``name`` is a safe single path component.

    Raises:
        InvalidNameError: If the name is empty, ``.`` or ``..``, starts
            with a dot, or contains a path separator.
    """
    if not name or not name.strip():
        raise InvalidNameError("Name must not be empty")
    if name in (".", ".."):
        raise InvalidNameError(f"Invalid name: {name!r}")
    if "/" in name or "\\" in name or (os.altsep and os.altsep in name):
        raise InvalidNameError(f"Name must not contain path separators: {name!r}")
    if name.startswith("."):
        raise InvalidNameError(f"Name must not start with a dot: {name!r}")
    return name


def _with_suffix(name: str) -> str:
    return name if name.endswith(MARKDOWN_SUFFIX) else name + MARKDOWN_SUFFIX


def _exists(path: Path) -> bool:
    return os.path.lexists(path)


def _skill_dir(source: Path) -> Path:
    """Return the skill directory for a ``SKILL.md`` path or the directory itself."""
    if source.name == SKILL_FILE and not source.is_dir():
        return source.parent
    return source


def _require_source(source: Path) -> None:
    if not _exists(source):
        raise EntityNotFoundError(f"Source does not exist: {source}")


def _profile(tool: str) -> ToolProfile:
    profile = get_profile(tool)
    if profile is None:
        raise MutationError(f"Unknown tool: {tool}")
    return profile


def _scope_base(scope: Scope, project: Path | None, home: Path | None) -> Path:
    if scope is Scope.GLOBAL:
        return home if home is not None else Path.home()
    if project is None:
        raise MutationError("Project path required for project-scoped entities")
    return Path(project)


def target_dir(
    tool: str,
    kind: EntityKind,
    scope: Scope,
    project: Path | None = None,
    home: Path | None = None,
) -> Path:
    """Resolve the directory a ``kind`` entity of ``tool`` lives in.

    Raises:
        MutationError: For an unknown tool, a kind the tool has no
            directory for, or project scope without a project path.
    """
    profile = _profile(tool)
    directory = profile.kind_dir(kind, scope, _scope_base(scope, project, home))
    if directory is None or kind not in TRANSFERABLE_KINDS:
        raise MutationError(f"Unknown tool/entity combination: {tool}/{kind.value}")
    return directory


def _entry_path(source: Path, kind: EntityKind) -> Path:
    """The path that stands for an entity on disk: skill dir or file."""
    return _skill_dir(source) if kind is EntityKind.SKILL else source


def _result_path(entry: Path, kind: EntityKind) -> Path:
    return entry / SKILL_FILE if kind is EntityKind.SKILL else entry


# -- Cross-scope operations -------------------------------------------------


def copy_entity(
    source: Path,
    kind: EntityKind,
    target_scope: Scope,
    project: Path | None = None,
    new_name: str | None = None,
    tool: str = CLAUDE,
    home: Path | None = None,
) -> Path:
    """Copy an agent, skill or command into another scope or tool.

    Args:
        source: Entity file (skills: ``SKILL.md`` or the skill directory).
        kind: Entity kind.
        target_scope: Scope to copy into.
        project: Target project root, required for project scope.
        new_name: Name for the copy. Defaults to the source's name.
        tool: Target tool id.
        home: Home directory for global scope. Defaults to ``Path.home()``.

    Returns:
        Path of the new file (skills: the new ``SKILL.md``).
    """
    source = Path(source)
    _require_source(source)
    directory = target_dir(tool, kind, target_scope, project, home)
    entry = _entry_path(source, kind)

    if new_name is not None:
        validate_name(new_name)
        name = new_name if kind is EntityKind.SKILL else _with_suffix(new_name)
    else:
        name = entry.name
    target = directory / name
    if _exists(target):
        raise TargetExistsError(f"Target already exists: {target}")

    with _wrap_os_errors("copy entity"):
        directory.mkdir(parents=True, exist_ok=True)
        if kind is EntityKind.SKILL:
            if not entry.is_dir():
                raise MutationError(f"Source is not a directory: {entry}")
            shutil.copytree(entry, target, symlinks=True)
        else:
            shutil.copyfile(entry, target)

    logger.info("Copied %s %s -> %s", kind.value, entry, target)
    return _result_path(target, kind)


def create_entity_symlink(
    source: Path,
    kind: EntityKind,
    target_scope: Scope,
    project: Path | None = None,
    tool: str = CLAUDE,
    home: Path | None = None,
) -> Path:
    """Link an agent, skill or command into another scope or tool.

    The link is named after the source file (skills: the directory) and
    points at the source's absolute path.

    Returns:
        Path of the created link.

    Raises:
        TargetExistsError: If anything, even a dangling link, already
            occupies the link path.
    """
    source = Path(source)
    _require_source(source)
    directory = target_dir(tool, kind, target_scope, project, home)
    entry = _entry_path(source, kind)
    link = directory / entry.name
    if _exists(link):
        raise TargetExistsError(f"Target already exists: {link}")

    with _wrap_os_errors("create symlink"):
        directory.mkdir(parents=True, exist_ok=True)
        os.symlink(entry.absolute(), link, target_is_directory=entry.is_dir())

    logger.info("Linked %s %s -> %s", kind.value, link, entry)
    return link


# -- In-place operations ----------------------------------------------------


def rename_entity(source: Path, new_name: str, kind: EntityKind) -> Path:
    """Rename an entity within its directory.

    Files get ``.md`` appended when ``new_name`` lacks it. Skills rename
    the whole directory.

    Returns:
        The new path (skills: the renamed ``SKILL.md``).
    """
    source = Path(source)
    _require_source(source)
    validate_name(new_name)
    entry = _entry_path(source, kind)
    name = new_name if kind is EntityKind.SKILL else _with_suffix(new_name)
    target = entry.parent / name
    if _exists(target):
        raise TargetExistsError(f"Target already exists: {target}")

    with _wrap_os_errors("rename entity"):
        entry.rename(target)

    logger.info("Renamed %s %s -> %s", kind.value, entry, target)
    return _result_path(target, kind)


def delete_entity(path: Path, kind: EntityKind) -> Path:
    """Delete an entity.

    Symlinks are unlinked, never followed. A skill deletes its whole
    directory; any other directory-backed entity is removed recursively.

    Returns:
        The path that was removed.
    """
    path = Path(path)
    if not _exists(path):
        raise EntityNotFoundError(f"Entity does not exist: {path}")
    entry = path if path.is_symlink() else _entry_path(path, kind)

    with _wrap_os_errors("delete entity"):
        if entry.is_symlink() or not entry.is_dir():
            entry.unlink()
        else:
            shutil.rmtree(entry)

    logger.info("Deleted %s %s", kind.value, entry)
    return entry


def duplicate_entity(source: Path, kind: EntityKind) -> Path:
    """Copy an entity next to itself as ``<name>-copy``, ``<name>-copy2``, ...

    Returns:
        Path of the duplicate (skills: its ``SKILL.md``).

    Raises:
        MutationError: If no free name is found within
            ``MAX_DUPLICATE_ATTEMPTS`` tries.
    """
    source = Path(source)
    _require_source(source)
    entry = _entry_path(source, kind)
    is_skill = kind is EntityKind.SKILL
    stem = entry.name if is_skill else Path(entry.name).stem

    target: Path | None = None
    for attempt in range(1, MAX_DUPLICATE_ATTEMPTS + 1):
        name = f"{stem}-copy" if attempt == 1 else f"{stem}-copy{attempt}"
        candidate = entry.parent / (name if is_skill else name + MARKDOWN_SUFFIX)
        if not _exists(candidate):
            target = candidate
            break
    if target is None:
        raise MutationError(f"Could not generate unique name for {entry}")

    with _wrap_os_errors("duplicate entity"):
        if is_skill:
            shutil.copytree(entry, target, symlinks=True)
        else:
            shutil.copyfile(entry, target)

    logger.info("Duplicated %s %s -> %s", kind.value, entry, target)
    return _result_path(target, kind)


# -- Creation ---------------------------------------------------------------


def create_entity(
    kind: EntityKind,
    name: str,
    scope: Scope,
    project: Path | None = None,
    content: str | None = None,
    tool: str = CLAUDE,
    home: Path | None = None,
) -> Path:
    """Create a new agent, skill, command or memory file.

    Args:
        kind: One of agent, skill, command, memory.
        name: Entity name. Ignored for memory, whose filename is fixed
            by the tool.
        scope: Global or project scope.
        project: Project root, required for project scope.
        content: File content. Defaults to the kind's template.
        tool: Target tool id.
        home: Home directory for global scope.

    Returns:
        Path of the written file.
    """
    if kind not in TEMPLATE_KINDS:
        raise MutationError(f"Cannot create entities of kind {kind.value}")
    profile = _profile(tool)
    base = _scope_base(scope, project, home)

    if kind is EntityKind.MEMORY:
        if profile.memory_file is None:
            raise MutationError(f"Tool {tool} has no memory file")
        # Project memory sits at the root, global memory in the config dir.
        directory = base if scope is Scope.PROJECT else profile.config_dir(scope, base)
        created = path = directory / profile.memory_file
    else:
        validate_name(name)
        directory = target_dir(tool, kind, scope, project, home)
        if kind is EntityKind.SKILL:
            created = directory / name
            path = created / SKILL_FILE
        else:
            created = path = directory / _with_suffix(name)

    if _exists(created):
        raise TargetExistsError(f"Target already exists: {created}")
    text = content if content is not None else default_content(kind, name, profile.tool_id)

    with _wrap_os_errors("create entity"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    logger.info("Created %s %s", kind.value, path)
    return path
