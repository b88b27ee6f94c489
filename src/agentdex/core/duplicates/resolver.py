"""Duplicate detection and precedence ranking.

Several locations may define an entity with the same logical name: a
global ``reviewer`` agent and a project ``reviewer`` agent, for example.
The owning tool loads only one of them. ``DuplicateResolver`` groups
entities by ``(kind, logical name)`` and ranks each group in the order the
tool resolves them, most specific first:

1. Project-local overrides (tier 0): ``settings.local.json`` and plugins
   installed with ``local`` scope.
2. Project scope (tier 1).
3. Global scope (tier 2).

Within a tier, earlier discovery order wins. Discovery order is fixed by
the orchestrator (global units first, then projects in scanner order), so
the ranking is deterministic for a fixed list of roots.

Settings group per tool: every layer of one tool shares the logical name
``<tool>:settings``, so rank 0 is the layer the tool applies first. Memory
files group by filename.

Hooks and MCP servers are expected to repeat (one event may carry many hook
groups; servers are already unified per source) and are never grouped.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from agentdex.core.duplicates.models import DuplicateGroup, DuplicateMember
from agentdex.parsers.base import BaseEntity, EntityKind, PluginEntity, Scope, SettingsEntity
from agentdex.parsers.settings import VARIANT_LOCAL

logger = logging.getLogger(__name__)

GROUPED_KINDS: frozenset[EntityKind] = frozenset({
    EntityKind.SETTINGS,
    EntityKind.MEMORY,
    EntityKind.AGENT,
    EntityKind.SKILL,
    EntityKind.COMMAND,
    EntityKind.PLUGIN,
})

TIER_LOCAL = 0
TIER_PROJECT = 1
TIER_GLOBAL = 2


def precedence_tier(entity: BaseEntity) -> int:
    """Return the scope tier of an entity; lower wins."""
    if isinstance(entity, PluginEntity) and entity.install_scope == "local":
        return TIER_LOCAL
    if isinstance(entity, SettingsEntity) and entity.variant == VARIANT_LOCAL:
        return TIER_LOCAL
    if entity.scope is Scope.PROJECT:
        return TIER_PROJECT
    return TIER_GLOBAL


class DuplicateResolver:
    """Group same-named entities and assign dense precedence ranks.

    Example::

        groups = DuplicateResolver().resolve(all_entities)
        for group in groups:
            print(group.name, group.active.path)
    """

    def __init__(self, kinds: frozenset[EntityKind] = GROUPED_KINDS) -> None:
        self.kinds = kinds

    def resolve(self, entities: Iterable[BaseEntity]) -> list[DuplicateGroup]:
        """Find all collisions in ``entities``.

        Args:
            entities: Entities in discovery order.

        Returns:
            One group per ``(kind, logical name)`` key shared by two or
            more entities, ordered by kind then name.
        """
        buckets: dict[tuple[EntityKind, str], list[tuple[int, BaseEntity]]] = defaultdict(list)
        for order, entity in enumerate(entities):
            if entity.kind in self.kinds:
                buckets[(entity.kind, entity.logical_name)].append((order, entity))

        groups: list[DuplicateGroup] = []
        for (kind, name), bucket in sorted(buckets.items(), key=lambda kv: (kv[0][0].value, kv[0][1])):
            if len(bucket) < 2:
                continue
            ranked = sorted(bucket, key=lambda item: (precedence_tier(item[1]), item[0]))
            members = tuple(
                DuplicateMember(
                    entity_id=entity.id,
                    path=entity.path,
                    scope=entity.scope,
                    project_path=entity.project_path,
                    tool=entity.tool,
                    rank=rank,
                )
                for rank, (_, entity) in enumerate(ranked)
            )
            groups.append(DuplicateGroup(kind=kind, name=name, members=members))

        logger.debug("Found %d duplicate groups", len(groups))
        return groups
