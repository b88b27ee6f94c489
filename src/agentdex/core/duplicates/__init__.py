"""Duplicate detection and precedence ranking for discovered entities.

Submodules:
    models    -- DuplicateMember, DuplicateGroup
    resolver  -- DuplicateResolver, precedence tiers
"""

from agentdex.core.duplicates.models import DuplicateGroup, DuplicateMember
from agentdex.core.duplicates.resolver import GROUPED_KINDS, DuplicateResolver, precedence_tier

__all__ = [
    "GROUPED_KINDS",
    "DuplicateGroup",
    "DuplicateMember",
    "DuplicateResolver",
    "precedence_tier",
]
