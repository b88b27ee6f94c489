"""End-to-end tests for DiscoveryOrchestrator over fake homes and projects."""

from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path

import pytest

from agentdex.config import DiscoveryConfig
from agentdex.core.consistency import ConfigStateType
from agentdex.discovery import DiscoveryOrchestrator, discover
from agentdex.discovery.extractor import EntityExtractor
from agentdex.exceptions import ScanError
from agentdex.parsers.base import EntityKind, Scope

from tests.discovery.helpers import (
    create_claude_home,
    create_claude_project,
    create_opencode_home,
    create_opencode_project,
    make_agent,
    make_command,
    make_skill,
    write_json,
)


class TestSnapshotContents:

    def test_empty_world(self, config: DiscoveryConfig) -> None:
        snapshot = DiscoveryOrchestrator(config).discover()
        assert snapshot.projects == ()
        assert snapshot.counts.total == 0
        assert snapshot.duplicates == ()

    def test_global_entities_without_projects(self, config: DiscoveryConfig, home: Path) -> None:
        create_claude_home(home)
        create_opencode_home(home)
        snapshot = DiscoveryOrchestrator(config).discover()
        assert {a.name for a in snapshot.agents} == {"reviewer", "planner"}
        assert [s.name for s in snapshot.skills] == ["pdf"]
        assert {m.name for m in snapshot.mcp_servers} == {"github", "docs"}
        assert all(e.scope is Scope.GLOBAL for e in snapshot.all_entities())

    def test_project_counts(self, config: DiscoveryConfig, code_root: Path) -> None:
        project = create_claude_project(code_root, "alpha")
        make_agent(project / ".claude", "a1")
        make_agent(project / ".claude", "a2")
        make_command(project / ".claude", "ship", namespace="ops")
        snapshot = DiscoveryOrchestrator(config).discover()
        (found,) = snapshot.projects
        assert found.counts.agents == 2
        assert found.counts.commands == 1
        assert found.counts.settings == 1
        assert found.counts.memory == 1

    def test_project_config_state_attached(self, config: DiscoveryConfig, code_root: Path) -> None:
        create_claude_project(code_root, "alpha")
        create_opencode_project(code_root, "beta")
        snapshot = DiscoveryOrchestrator(config).discover()
        states = {p.name: p.config_state.state for p in snapshot.projects}
        assert states == {
            "alpha": ConfigStateType.NEEDS_MIGRATION,
            "beta": ConfigStateType.MISSING_SYMLINK,
        }

    def test_ids_are_unique_and_stable(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        create_claude_home(home)
        create_claude_project(code_root, "alpha")
        first = DiscoveryOrchestrator(config).discover()
        second = DiscoveryOrchestrator(config).discover()
        ids = [e.id for e in first.all_entities()]
        assert len(ids) == len(set(ids))
        assert ids == [e.id for e in second.all_entities()]

    def test_lookup_by_id(self, config: DiscoveryConfig, home: Path) -> None:
        create_claude_home(home)
        snapshot = DiscoveryOrchestrator(config).discover()
        agent = snapshot.agents[0]
        assert snapshot.get(agent.id) is agent
        assert snapshot.get("agent_missing") is None

    def test_entities_mapping_is_read_only(self, config: DiscoveryConfig, home: Path) -> None:
        create_claude_home(home)
        snapshot = DiscoveryOrchestrator(config).discover()
        with pytest.raises(TypeError):
            snapshot.entities[EntityKind.AGENT] = ()
        assert snapshot.agents

    def test_snapshot_is_json_serializable(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        create_claude_home(home)
        create_opencode_project(code_root, "beta")
        data = json.loads(json.dumps(DiscoveryOrchestrator(config).discover().to_dict()))
        assert set(data) >= {"projects", "agents", "skills", "mcp_servers", "duplicates", "symlinks"}
        assert data["agents"][0]["type"] == "agent"
        assert data["projects"][0]["config_state"]["state"] == "missing_symlink"


class TestDuplicates:

    def test_reviewer_in_two_projects_and_global(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        create_claude_home(home)
        one = create_claude_project(code_root, "one")
        two = create_claude_project(code_root, "two")
        make_agent(one / ".claude", "reviewer")
        make_agent(two / ".claude", "reviewer")

        snapshot = DiscoveryOrchestrator(config).discover()
        groups = [g for g in snapshot.duplicates if g.kind is EntityKind.AGENT and g.name == "reviewer"]
        assert len(groups) == 1
        members = groups[0].members
        assert [m.rank for m in members] == [0, 1, 2]
        assert [m.scope for m in members] == [Scope.PROJECT, Scope.PROJECT, Scope.GLOBAL]
        assert [m.project_path for m in members[:2]] == [one, two]

    def test_namespaced_commands_do_not_collide(self, config: DiscoveryConfig, code_root: Path) -> None:
        project = create_claude_project(code_root, "alpha")
        make_command(project / ".claude", "deploy", namespace="web")
        make_command(project / ".claude", "deploy", namespace="api")
        snapshot = DiscoveryOrchestrator(config).discover()
        assert [g for g in snapshot.duplicates if g.kind is EntityKind.COMMAND] == []

    def test_same_name_across_tools_collides(self, config: DiscoveryConfig, home: Path) -> None:
        make_skill(home / ".claude", "docs")
        make_skill(home / ".config" / "opencode", "docs", subdir="skill")
        snapshot = DiscoveryOrchestrator(config).discover()
        (group,) = snapshot.duplicates
        assert [m.tool for m in group.members] == ["claude", "opencode"]

    def test_settings_layers_rank_local_project_global(
        self, config: DiscoveryConfig, home: Path, code_root: Path
    ) -> None:
        create_claude_home(home)
        one = create_claude_project(code_root, "one")
        two = create_claude_project(code_root, "two")
        write_json(one / ".claude" / "settings.local.json", {"permissions": {"allow": ["Bash(make)"]}})

        snapshot = DiscoveryOrchestrator(config).discover()
        (group,) = [g for g in snapshot.duplicates if g.kind is EntityKind.SETTINGS]
        assert group.name == "claude:settings"
        assert [m.path for m in group.members] == [
            one / ".claude" / "settings.local.json",
            one / ".claude" / "settings.json",
            two / ".claude" / "settings.json",
            home / ".claude" / "settings.json",
        ]
        assert [m.rank for m in group.members] == [0, 1, 2, 3]

    def test_memory_files_are_grouped(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        create_claude_home(home)
        one = create_claude_project(code_root, "one")
        two = create_claude_project(code_root, "two")
        snapshot = DiscoveryOrchestrator(config).discover()
        (group,) = [g for g in snapshot.duplicates if g.kind is EntityKind.MEMORY]
        assert group.name == "CLAUDE.md"
        assert [m.path for m in group.members] == [
            one / "CLAUDE.md",
            two / "CLAUDE.md",
            home / ".claude" / "CLAUDE.md",
        ]


class TestSymlinks:

    def test_broken_skill_link_is_reported(self, config: DiscoveryConfig, home: Path, tmp_path: Path) -> None:
        skills = home / ".claude" / "skills"
        skills.mkdir(parents=True)
        os.symlink(tmp_path / "gone", skills / "ghost")
        snapshot = DiscoveryOrchestrator(config).discover()
        (skill,) = snapshot.skills
        assert skill.is_symlink and skill.content is None
        (info,) = snapshot.symlinks
        assert info.is_broken
        assert info.entity_id == skill.id

    def test_valid_agent_link(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        source = make_agent(home / ".claude", "shared")
        project = create_claude_project(code_root, "alpha")
        (project / ".claude" / "agents").mkdir()
        os.symlink(source, project / ".claude" / "agents" / "shared.md")
        snapshot = DiscoveryOrchestrator(config).discover()
        (info,) = snapshot.symlinks
        assert not info.is_broken
        assert info.target == source


class TestFailureHandling:

    def test_no_existing_root_raises(self, home: Path, tmp_path: Path) -> None:
        config = DiscoveryConfig(home=home, roots=(tmp_path / "nope",), include_home=False)
        with pytest.raises(ScanError):
            DiscoveryOrchestrator(config).discover()

    def test_failing_unit_degrades(
        self, config: DiscoveryConfig, home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        create_claude_home(home)
        original = EntityExtractor.extract

        def flaky(self, unit):
            if unit.kind is EntityKind.AGENT:
                raise RuntimeError("boom")
            return original(self, unit)

        monkeypatch.setattr(EntityExtractor, "extract", flaky)
        snapshot = DiscoveryOrchestrator(config).discover()
        assert snapshot.agents == ()
        assert [s.name for s in snapshot.skills] == ["pdf"]

    def test_single_worker_matches_parallel(self, config: DiscoveryConfig, home: Path, code_root: Path) -> None:
        create_claude_home(home)
        create_claude_project(code_root, "alpha")
        create_opencode_project(code_root, "beta")
        parallel = discover(config)
        serial = discover(replace(config, max_workers=1))
        assert [e.id for e in parallel.all_entities()] == [e.id for e in serial.all_entities()]
