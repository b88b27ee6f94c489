"""Entity write operations and creation templates.

Submodules:
    entity_ops -- copy, link, rename, delete, duplicate, create
    templates  -- default content per entity kind
"""

from agentdex.actions.entity_ops import (
    MAX_DUPLICATE_ATTEMPTS,
    TRANSFERABLE_KINDS,
    copy_entity,
    create_entity,
    create_entity_symlink,
    delete_entity,
    duplicate_entity,
    rename_entity,
    target_dir,
    validate_name,
)
from agentdex.actions.templates import TEMPLATE_KINDS, default_content

__all__ = [
    "MAX_DUPLICATE_ATTEMPTS",
    "TEMPLATE_KINDS",
    "TRANSFERABLE_KINDS",
    "copy_entity",
    "create_entity",
    "create_entity_symlink",
    "default_content",
    "delete_entity",
    "duplicate_entity",
    "rename_entity",
    "target_dir",
    "validate_name",
]
