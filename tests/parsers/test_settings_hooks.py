"""Tests for settings parsing (JSON and JSONC) and hook extraction."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from agentdex.parsers.base import EntityContext, HookEntity, Scope, SettingsEntity
from agentdex.parsers.settings import (
    SettingsParser,
    extract_hooks,
    load_json_file,
    parse_json_text,
    strip_json_comments,
)


@pytest.fixture
def context() -> EntityContext:
    return EntityContext(tool="claude", scope=Scope.GLOBAL)


def _settings(tmp_path: Path, data: dict, context: EntityContext, variant: str = "global") -> SettingsEntity:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data))
    (entity,) = SettingsParser(variant).parse(path, context)
    return entity


class TestJsonComments:

    def test_line_and_block_comments(self) -> None:
        text = '{\n  // line\n  "a": 1, /* block */ "b": 2\n}'
        assert json.loads(strip_json_comments(text)) == {"a": 1, "b": 2}

    def test_markers_inside_strings_are_kept(self) -> None:
        text = '{"url": "https://x.example.com/*path*/"}'
        assert json.loads(strip_json_comments(text)) == {"url": "https://x.example.com/*path*/"}

    def test_escaped_quote_in_string(self) -> None:
        text = '{"a": "say \\"//hi\\""} // tail'
        assert json.loads(strip_json_comments(text)) == {"a": 'say "//hi"'}

    def test_unterminated_block_comment_drops_rest(self) -> None:
        assert strip_json_comments('{"a": 1} /* open') == '{"a": 1} '


class TestParseJsonText:

    def test_object(self) -> None:
        assert parse_json_text('{"a": 1}') == ({"a": 1}, None)

    def test_array_is_rejected(self) -> None:
        data, error = parse_json_text("[1, 2]")
        assert data is None
        assert "not an object" in error

    def test_comments_need_opt_in(self) -> None:
        data, error = parse_json_text('{"a": 1} // c')
        assert data is None and error.startswith("Invalid JSON")
        assert parse_json_text('{"a": 1} // c', allow_comments=True) == ({"a": 1}, None)

    def test_load_json_file_uses_suffix(self, tmp_path: Path) -> None:
        jsonc = tmp_path / "opencode.jsonc"
        jsonc.write_text('{/* x */ "a": 1}')
        assert load_json_file(jsonc) == {"a": 1}
        assert load_json_file(tmp_path / "missing.json") is None


class TestSettingsParser:

    def test_valid_file(self, tmp_path: Path, context: EntityContext) -> None:
        entity = _settings(tmp_path, {"model": "opus"}, context)
        assert entity.parsed == {"model": "opus"}
        assert entity.parse_error is None
        assert entity.variant == "global"
        assert entity.name == "settings.json"
        assert entity.id.startswith("settings_")

    def test_invalid_file_is_still_an_entity(self, tmp_path: Path, context: EntityContext) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{broken")
        (entity,) = SettingsParser().parse(path, context)
        assert entity.parsed is None
        assert entity.content == "{broken"
        assert entity.parse_error

    def test_missing_file(self, tmp_path: Path, context: EntityContext) -> None:
        assert SettingsParser().parse(tmp_path / "settings.json", context) == []


class TestExtractHooks:

    def test_groups_become_entities(self, tmp_path: Path, context: EntityContext) -> None:
        settings = _settings(tmp_path, {
            "hooks": {
                "PreToolUse": [
                    {"matcher": "Bash", "hooks": [
                        {"type": "command", "command": "check.sh", "timeout": 10},
                        {"type": "command", "command": "log.sh", "once": True},
                    ]},
                ],
                "SessionStart": [{"hooks": [{"type": "prompt", "prompt": "Hello"}]}],
            }
        }, context)
        hooks = extract_hooks(settings)
        assert [h.name for h in hooks] == ["PreToolUse:Bash", "SessionStart"]
        first = hooks[0]
        assert isinstance(first, HookEntity)
        assert first.event == "PreToolUse"
        assert first.matcher == "Bash"
        assert [d.command for d in first.hooks] == ["check.sh", "log.sh"]
        assert first.hooks[0].timeout == 10
        assert first.hooks[1].once is True
        assert first.path == settings.path
        assert hooks[1].matcher is None
        assert hooks[1].hooks[0].prompt == "Hello"

    def test_source_follows_variant(self, tmp_path: Path) -> None:
        context = EntityContext(tool="claude", scope=Scope.PROJECT, project_path=tmp_path)
        settings = _settings(
            tmp_path,
            {"hooks": {"Stop": [{"hooks": [{"type": "command", "command": "x"}]}]}},
            context,
            variant="local",
        )
        (hook,) = extract_hooks(settings)
        assert hook.source == "local"
        assert hook.scope is Scope.PROJECT
        assert hook.project_path == tmp_path

    def test_invalid_shapes_are_skipped(self, tmp_path: Path, context: EntityContext) -> None:
        settings = _settings(tmp_path, {
            "hooks": {
                "A": "not a list",
                "B": ["not a dict", {"hooks": "nope"}, {"hooks": [{"no": "type"}]}],
                "C": [{"matcher": "", "hooks": [{"type": "command", "command": "ok"}]}],
            }
        }, context)
        (hook,) = extract_hooks(settings)
        assert hook.name == "C"

    def test_hook_ids_distinguish_groups(self, tmp_path: Path, context: EntityContext) -> None:
        group = {"matcher": "Bash", "hooks": [{"type": "command", "command": "x"}]}
        settings = _settings(tmp_path, {"hooks": {"PreToolUse": [group, group]}}, context)
        first, second = extract_hooks(settings)
        assert first.name == second.name
        assert first.id != second.id

    def test_unparsed_settings_have_no_hooks(self, tmp_path: Path, context: EntityContext) -> None:
        path = tmp_path / "settings.json"
        path.write_text("nope")
        (entity,) = SettingsParser().parse(path, context)
        assert extract_hooks(entity) == []
