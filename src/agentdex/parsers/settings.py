"""Parser for tool settings files and the hooks they declare.

Claude Code keeps ``settings.json`` in its config directory, plus a
project-only ``settings.local.json`` for personal overrides. OpenCode
uses ``opencode.json`` or ``opencode.jsonc`` (JSON with ``//`` and
``/* */`` comments).

A settings file that cannot be parsed is still reported: ``parsed`` is
None and ``parse_error`` carries the reason.

Hooks
-----
Hooks are not separate files. They live in the ``hooks`` section of a
parsed settings structure, keyed by event name::

    {
      "hooks": {
        "PreToolUse": [
          {"matcher": "Bash", "hooks": [{"type": "command", "command": "lint.sh"}]}
        ]
      }
    }

``extract_hooks()`` emits one ``HookEntity`` per ``(event, matcher)``
group that declares at least one valid hook definition.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from agentdex.parsers.base import (
    BaseEntity,
    EntityContext,
    EntityKind,
    EntityParser,
    HookDefinition,
    HookEntity,
    SettingsEntity,
    make_entity_id,
    read_text,
)

logger = logging.getLogger(__name__)

VARIANT_GLOBAL = "global"
VARIANT_PROJECT = "project"
VARIANT_LOCAL = "local"


def strip_json_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments.

    Comment markers inside string literals are preserved. Newlines that
    end a line comment are kept so error positions stay meaningful.
    """
    out: list[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def parse_json_text(text: str, allow_comments: bool = False) -> tuple[dict[str, Any] | None, str | None]:
    """Parse a JSON object.

    Args:
        text: Raw file content.
        allow_comments: Strip JSONC comments before parsing.

    Returns:
        ``(data, None)`` on success, ``(None, reason)`` otherwise.
    """
    if allow_comments:
        text = strip_json_comments(text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return None, f"Invalid JSON: {exc}"
    if not isinstance(data, dict):
        return None, "Top-level JSON value is not an object"
    return data, None


def load_json_file(path: Path) -> dict[str, Any] | None:
    """Read and parse a JSON or JSONC file, returning None on any failure."""
    text = read_text(path)
    if text is None:
        return None
    data, error = parse_json_text(text, allow_comments=path.suffix == ".jsonc")
    if error is not None:
        logger.warning("Skipping %s: %s", path, error)
    return data


class SettingsParser(EntityParser):
    """Materialize one settings file as a ``SettingsEntity``.

    Args:
        variant: Settings layer -- ``"global"``, ``"project"`` or
            ``"local"``.
    """

    kind = EntityKind.SETTINGS

    def __init__(self, variant: str = VARIANT_PROJECT) -> None:
        self.variant = variant

    def can_parse(self, path: Path) -> bool:
        return path.is_file()

    def parse(self, path: Path, context: EntityContext) -> list[BaseEntity]:
        if not self.can_parse(path):
            return []
        content = read_text(path)
        if content is None:
            parsed, error = None, "File could not be read"
        else:
            parsed, error = parse_json_text(content, allow_comments=path.suffix == ".jsonc")
        if error is not None:
            logger.warning("Settings file %s not parsed: %s", path, error)
        return [
            SettingsEntity(
                **context.base_fields(self.kind, path.name, path),
                content=content,
                variant=self.variant,
                parsed=parsed,
                parse_error=error,
            )
        ]


def _hook_definition(raw: Any) -> HookDefinition | None:
    if not isinstance(raw, dict) or not isinstance(raw.get("type"), str):
        return None
    timeout = raw.get("timeout")
    once = raw.get("once")
    return HookDefinition(
        type=raw["type"],
        command=raw.get("command") if isinstance(raw.get("command"), str) else None,
        prompt=raw.get("prompt") if isinstance(raw.get("prompt"), str) else None,
        timeout=timeout if isinstance(timeout, int) and not isinstance(timeout, bool) else None,
        once=once if isinstance(once, bool) else None,
    )


def extract_hooks(settings: SettingsEntity) -> list[HookEntity]:
    """Extract hook groups from an already-parsed settings entity.

    Args:
        settings: A settings entity; unparsed settings yield no hooks.

    Returns:
        One ``HookEntity`` per ``(event, matcher)`` group, in declaration
        order. The hook's ``path`` is the settings file and its
        ``source`` is the settings variant.
    """
    if not settings.parsed:
        return []
    hooks_section = settings.parsed.get("hooks")
    if not isinstance(hooks_section, dict):
        return []

    results: list[HookEntity] = []
    for event, groups in hooks_section.items():
        if not isinstance(groups, list):
            continue
        for index, group in enumerate(groups):
            if not isinstance(group, dict):
                continue
            raw_defs = group.get("hooks")
            if not isinstance(raw_defs, list):
                continue
            definitions = tuple(d for d in map(_hook_definition, raw_defs) if d is not None)
            if not definitions:
                continue
            matcher = group.get("matcher") if isinstance(group.get("matcher"), str) else None
            name = f"{event}:{matcher}" if matcher else event
            results.append(
                HookEntity(
                    id=make_entity_id(EntityKind.HOOK, f"{settings.path}#{event}#{index}"),
                    name=name,
                    path=settings.path,
                    scope=settings.scope,
                    tool=settings.tool,
                    project_path=settings.project_path,
                    last_modified=settings.last_modified,
                    event=event,
                    matcher=matcher,
                    hooks=definitions,
                    source=settings.variant,
                )
            )
    return results
