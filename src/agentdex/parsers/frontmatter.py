"""Frontmatter parsing and serialization for Markdown entity files.

Agents, skills and commands are Markdown documents that may open with a
metadata block delimited by ``---`` lines::

    ---
    name: reviewer
    description: "Reviews code: style and bugs"
    tools: Read, Grep, Glob
    model: sonnet
    ---

    You are a code reviewer.

Grammar
-------
The block is read with a deliberately narrow, line-based grammar rather
than a general YAML parser:

- ``key: value`` lines, one key per line. Blank lines and ``#`` comment
  lines are ignored.
- Values: double or single quoted strings, bracketed inline lists
  (``[a, b, c]``), ``true``/``false``, integer and float literals.
  Everything else is a bare string, commas included. Tool list keys
  (``tools``, ``allowed-tools``, ``disallowed-tools``) also accept the bare
  ``a, b, c`` form.
- A key with an empty value followed by ``- item`` lines is a block list.
- A key with an empty value followed by indented ``key: value`` lines is
  a nested mapping. Only this nested block is handed to ``yaml.safe_load``.

A document without an opening delimiter, without a closing delimiter, or
with a line that fits none of the rules above yields ``None`` metadata
and the full text as body.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

_DELIMITER = "---"
_KEY_LINE = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_.\- ]*?)\s*:\s*(.*)$")
_INT = re.compile(r"^[-+]?\d+$")
_FLOAT = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?$")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\", "'": "'"}

# Keys whose bare value is a comma-separated list.
LIST_KEYS: frozenset[str] = frozenset({"tools", "allowed-tools", "disallowed-tools"})

# Inline list formatting limits used by serialize().
_INLINE_MAX_ITEMS = 5
_INLINE_MAX_ITEM_LEN = 20


def _unescape(text: str) -> str:
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
        else:
            out.append(ch)
    return "".join(out)


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'"


def _parse_scalar(value: str) -> Any:
    """Parse a single value without list splitting."""
    if _is_quoted(value):
        return _unescape(value[1:-1])
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT.match(value):
        return int(value)
    if _FLOAT.match(value):
        return float(value)
    return value


def _parse_value(key: str, value: str) -> Any:
    if _is_quoted(value):
        return _unescape(value[1:-1])
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1].strip()
        if not inner:
            return []
        return [_parse_scalar(item.strip()) for item in inner.split(",")]
    if key in LIST_KEYS and "," in value:
        return [item.strip() for item in value.split(",") if item.strip()]
    return _parse_scalar(value)


def _split_document(text: str) -> tuple[list[str], str] | None:
    """Return the metadata lines and the body, or None without a block."""
    lines = text.split("\n")
    if not lines or lines[0].rstrip("\r").rstrip() != _DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r").rstrip() == _DELIMITER:
            block = [line.rstrip("\r") for line in lines[1:index]]
            body = "\n".join(lines[index + 1:]).lstrip("\r\n")
            return block, body
    return None


def _parse_block(lines: list[str]) -> dict[str, Any] | None:
    data: dict[str, Any] = {}
    index = 0
    while index < len(lines):
        line = lines[index]
        stripped = line.strip()
        index += 1
        if not stripped or stripped.startswith("#"):
            continue
        if line[0].isspace():
            return None  # indented line without an owning key
        match = _KEY_LINE.match(line)
        if match is None:
            return None
        key, raw = match.group(1), (match.group(2) or "").strip()
        if raw:
            data[key] = _parse_value(key, raw)
            continue

        # Empty value: collect the indented or list lines that follow.
        children: list[str] = []
        while index < len(lines):
            nxt = lines[index]
            if nxt.strip() and not nxt[0].isspace() and not nxt.lstrip().startswith("- "):
                break
            children.append(nxt)
            index += 1
        items = [c.strip() for c in children if c.strip()]
        if not items:
            continue
        if all(item.startswith("- ") or item == "-" for item in items):
            data[key] = [_parse_scalar(item[2:].strip()) for item in items]
            continue
        try:
            nested = yaml.safe_load("\n".join(children))
        except yaml.YAMLError:
            return None
        if not isinstance(nested, (dict, list)):
            return None
        data[key] = nested
    return data


class FrontmatterParser:
    """Split Markdown documents into a metadata block and a body.

    Stateless; one shared instance is safe to use from several threads.
    """

    def parse(self, text: str) -> tuple[dict[str, Any] | None, str]:
        """Extract the metadata block from ``text``.

        Args:
            text: Full document content.

        Returns:
            ``(frontmatter, body)``. ``frontmatter`` is None when the
            document has no block or the block is malformed; the body is
            then the full text.
        """
        split = _split_document(text)
        if split is None:
            return None, text
        block, body = split
        data = _parse_block(block)
        if data is None:
            return None, text
        return data, body

    def serialize(self, data: dict[str, Any]) -> str:
        """Render ``data`` as a delimited metadata block.

        None values and empty lists are omitted. Strings that would read
        back as something else are quoted.

        Returns:
            The block, starting and ending with a ``---`` line, without a
            trailing newline.
        """
        lines = [_DELIMITER]
        for key, value in data.items():
            if value is None:
                continue
            if isinstance(value, bool):
                lines.append(f"{key}: {'true' if value else 'false'}")
            elif isinstance(value, (int, float)):
                lines.append(f"{key}: {value!r}")
            elif isinstance(value, str):
                lines.append(f"{key}: {_format_string(value)}")
            elif isinstance(value, (list, tuple)):
                if not value:
                    continue
                if _inline_list(value):
                    lines.append(f"{key}: [{', '.join(value)}]")
                else:
                    lines.append(f"{key}:")
                    lines.extend(f"  - {_format_item(item)}" for item in value)
            elif isinstance(value, dict):
                lines.append(f"{key}:")
                dumped = yaml.safe_dump(value, default_flow_style=False, sort_keys=True)
                lines.extend(f"  {line}" for line in dumped.splitlines())
            else:
                lines.append(f"{key}: {_format_string(str(value))}")
        lines.append(_DELIMITER)
        return "\n".join(lines)

    def render(self, data: dict[str, Any], body: str) -> str:
        """Render a complete document: block, blank line, then body."""
        return f"{self.serialize(data)}\n\n{body}"


def _needs_quotes(text: str) -> bool:
    if not text or text != text.strip():
        return True
    if any(ch in text for ch in ':#,"\'\n\r\t\\'):
        return True
    if text.startswith(("-", "[")) or text in ("true", "false"):
        return True
    return bool(_INT.match(text) or _FLOAT.match(text))


def _format_string(text: str) -> str:
    return f'"{_escape(text)}"' if _needs_quotes(text) else text


def _format_item(item: Any) -> str:
    if isinstance(item, str):
        return _format_string(item)
    if isinstance(item, bool):
        return "true" if item else "false"
    return str(item)


def _inline_list(items: list[Any] | tuple[Any, ...]) -> bool:
    return (
        2 <= len(items) <= _INLINE_MAX_ITEMS
        and all(
            isinstance(i, str) and len(i) < _INLINE_MAX_ITEM_LEN and not _needs_quotes(i)
            for i in items
        )
    )


# Shared, stateless instance.
FRONTMATTER = FrontmatterParser()
