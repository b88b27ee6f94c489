"""Tests for DuplicateResolver grouping and precedence ranking."""

from __future__ import annotations

from pathlib import Path

from agentdex.core.duplicates import DuplicateResolver, precedence_tier
from agentdex.parsers.base import (
    AgentEntity,
    CommandEntity,
    EntityKind,
    HookEntity,
    McpServerEntity,
    MemoryEntity,
    PluginEntity,
    Scope,
    SettingsEntity,
    SkillEntity,
)


def _agent(name: str, scope: Scope, project: str | None = None, tool: str = "claude") -> AgentEntity:
    base = Path(project) if project else Path("/home/u/.claude")
    path = base / "agents" / f"{name}.md"
    return AgentEntity(
        id=f"agent-{path}",
        name=name,
        path=path,
        scope=scope,
        tool=tool,
        project_path=Path(project) if project else None,
    )


class TestPrecedenceTier:

    def test_tiers(self) -> None:
        assert precedence_tier(_agent("a", Scope.PROJECT, "/p")) == 1
        assert precedence_tier(_agent("a", Scope.GLOBAL)) == 2

    def test_local_plugin_install_is_most_specific(self) -> None:
        local = PluginEntity(id="p1", name="fmt", path=Path("/c/fmt"), scope=Scope.PROJECT,
                             tool="claude", install_scope="local")
        project = PluginEntity(id="p2", name="fmt", path=Path("/c/fmt"), scope=Scope.PROJECT,
                               tool="claude", install_scope="project")
        assert precedence_tier(local) == 0
        assert precedence_tier(project) == 1


class TestResolve:

    def test_no_collisions(self) -> None:
        assert DuplicateResolver().resolve([_agent("a", Scope.GLOBAL), _agent("b", Scope.GLOBAL)]) == []

    def test_project_outranks_global_regardless_of_order(self) -> None:
        global_agent = _agent("reviewer", Scope.GLOBAL)
        project_agent = _agent("reviewer", Scope.PROJECT, "/work/app")
        (group,) = DuplicateResolver().resolve([global_agent, project_agent])
        assert group.kind is EntityKind.AGENT
        assert group.name == "reviewer"
        assert [m.entity_id for m in group.members] == [project_agent.id, global_agent.id]
        assert [m.rank for m in group.members] == [0, 1]
        assert group.active.entity_id == project_agent.id
        assert group.active.is_active

    def test_ties_break_by_discovery_order(self) -> None:
        first = _agent("x", Scope.PROJECT, "/b")
        second = _agent("x", Scope.PROJECT, "/a")
        (group,) = DuplicateResolver().resolve([first, second])
        assert [m.project_path for m in group.members] == [Path("/b"), Path("/a")]

    def test_local_plugin_beats_project_and_user(self) -> None:
        def plugin(pid: str, scope: Scope, install: str) -> PluginEntity:
            return PluginEntity(id=pid, name="fmt", path=Path(f"/c/{pid}"), scope=scope,
                                tool="claude", install_scope=install)

        user = plugin("u", Scope.GLOBAL, "user")
        project = plugin("p", Scope.PROJECT, "project")
        local = plugin("l", Scope.PROJECT, "local")
        (group,) = DuplicateResolver().resolve([user, project, local])
        assert [m.entity_id for m in group.members] == ["l", "p", "u"]

    def test_kinds_are_grouped_separately(self) -> None:
        agent = _agent("deploy", Scope.GLOBAL)
        command = CommandEntity(id="c1", name="deploy", path=Path("/x/deploy.md"), scope=Scope.GLOBAL, tool="claude")
        assert DuplicateResolver().resolve([agent, command]) == []

    def test_commands_group_by_namespaced_name(self) -> None:
        def command(cid: str, namespace: str | None) -> CommandEntity:
            return CommandEntity(id=cid, name="deploy", path=Path(f"/{cid}.md"), scope=Scope.GLOBAL,
                                 tool="claude", namespace=namespace)

        groups = DuplicateResolver().resolve([command("a", "web"), command("b", "web"), command("c", None)])
        assert [(g.name, len(g.members)) for g in groups] == [("web:deploy", 2)]

    def test_hooks_and_mcp_servers_are_not_grouped(self) -> None:
        hooks = [
            HookEntity(id=f"h{i}", name="Stop", path=Path("/s.json"), scope=Scope.GLOBAL, tool="claude", event="Stop")
            for i in range(2)
        ]
        servers = [
            McpServerEntity(id=f"m{i}", name="github", path=Path(f"/p{i}/.mcp.json"), scope=Scope.PROJECT,
                            tool="claude")
            for i in range(2)
        ]
        assert DuplicateResolver().resolve(hooks + servers) == []

    def test_memory_files_group_by_filename(self) -> None:
        def memory(mid: str, name: str, scope: Scope) -> MemoryEntity:
            return MemoryEntity(id=mid, name=name, path=Path(f"/{mid}/{name}"), scope=scope, tool="claude")

        groups = DuplicateResolver().resolve([
            memory("g", "CLAUDE.md", Scope.GLOBAL),
            memory("p1", "CLAUDE.md", Scope.PROJECT),
            memory("p2", "AGENTS.md", Scope.PROJECT),
        ])
        assert [(g.kind, g.name) for g in groups] == [(EntityKind.MEMORY, "CLAUDE.md")]
        assert [m.entity_id for m in groups[0].members] == ["p1", "g"]

    def test_groups_sorted_by_kind_then_name(self) -> None:
        skills = [
            SkillEntity(id=f"s{i}", name="zz", path=Path(f"/s{i}/SKILL.md"), scope=Scope.GLOBAL, tool="claude")
            for i in range(2)
        ]
        agents = [_agent("bb", Scope.GLOBAL, tool=t) for t in ("claude", "opencode")]
        agents += [_agent("aa", Scope.PROJECT, f"/p{i}") for i in range(2)]
        groups = DuplicateResolver().resolve(skills + agents)
        assert [(g.kind.value, g.name) for g in groups] == [("agent", "aa"), ("agent", "bb"), ("skill", "zz")]

    def test_to_dict(self) -> None:
        (group,) = DuplicateResolver().resolve([_agent("r", Scope.GLOBAL), _agent("r", Scope.PROJECT, "/w")])
        data = group.to_dict()
        assert data["kind"] == "agent"
        assert data["members"][0] == {
            "entity_id": "agent-/w/agents/r.md",
            "path": "/w/agents/r.md",
            "scope": "project",
            "project_path": "/w",
            "tool": "claude",
            "rank": 0,
        }


def _settings(sid: str, variant: str, project: str | None = None, tool: str = "claude") -> SettingsEntity:
    name = "settings.local.json" if variant == "local" else "settings.json"
    base = Path(project) / ".claude" if project else Path("/home/u/.claude")
    return SettingsEntity(
        id=sid,
        name=name,
        path=base / name,
        scope=Scope.PROJECT if project else Scope.GLOBAL,
        tool=tool,
        project_path=Path(project) if project else None,
        variant=variant,
    )


class TestSettingsLayers:

    def test_local_settings_are_most_specific(self) -> None:
        assert precedence_tier(_settings("l", "local", "/w")) == 0
        assert precedence_tier(_settings("p", "project", "/w")) == 1
        assert precedence_tier(_settings("g", "global")) == 2

    def test_layers_of_one_tool_form_one_group(self) -> None:
        layers = [_settings("g", "global"), _settings("p", "project", "/w"), _settings("l", "local", "/w")]
        (group,) = DuplicateResolver().resolve(layers)
        assert group.kind is EntityKind.SETTINGS
        assert group.name == "claude:settings"
        assert [m.entity_id for m in group.members] == ["l", "p", "g"]
        assert group.active.entity_id == "l"

    def test_tools_are_grouped_separately(self) -> None:
        layers = [_settings("c", "global"), _settings("o", "global", tool="opencode")]
        assert DuplicateResolver().resolve(layers) == []
