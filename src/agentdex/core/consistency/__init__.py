"""Memory-file consistency engine (``CLAUDE.md`` vs ``AGENTS.md``).

Submodules:
    models  -- FileStatus, ConfigStateType, ConfigState, BulkFixReport
    engine  -- ConfigConsistencyEngine
"""

from agentdex.core.consistency.engine import ConfigConsistencyEngine, file_status
from agentdex.core.consistency.models import (
    AUTO_FIXABLE,
    BulkFixReport,
    ConfigState,
    ConfigStateType,
    FileStatus,
    FixOutcome,
)

__all__ = [
    "AUTO_FIXABLE",
    "BulkFixReport",
    "ConfigConsistencyEngine",
    "ConfigState",
    "ConfigStateType",
    "FileStatus",
    "FixOutcome",
    "file_status",
]
