"""Symlink resolution and audit.

Submodules:
    models   -- SymlinkInfo
    auditor  -- SymlinkAuditor, resolve_link
"""

from agentdex.core.symlinks.auditor import SymlinkAuditor, resolve_link
from agentdex.core.symlinks.models import SymlinkInfo

__all__ = ["SymlinkAuditor", "SymlinkInfo", "resolve_link"]
