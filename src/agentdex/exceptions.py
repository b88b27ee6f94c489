"""agentdex exception hierarchy.

All public exceptions inherit from AgentdexError, giving callers a single
base class to catch when they want to handle any agentdex-specific failure
without swallowing unrelated errors.

Discovery itself never raises for a single unreadable or malformed file;
those degrade the affected entity instead. The exceptions below cover
configuration loading, write operations, and consistency fixes.
"""


class AgentdexError(Exception):
    """Base exception for all agentdex errors."""


class ParseError(AgentdexError):
    """Raised when a document cannot be parsed.

    Only raised by explicit parse helpers. During discovery the same
    failures are recorded as a null parsed field on the entity.
    """


class ScanError(AgentdexError):
    """Raised when a scan cannot start at all.

    Covers a root list in which no directory exists. Failures
    inside an individual subtree never surface as ``ScanError``.
    """


class ConfigError(AgentdexError):
    """Raised when the agentdex configuration file is invalid.

    Covers malformed YAML and values of the wrong type.
    """


class ConsistencyError(AgentdexError):
    """Raised when a project's memory-file state cannot be inspected."""


class ConfigFixError(ConsistencyError):
    """Raised when a memory-file fix cannot be applied.

    Covers the ``conflict`` classification (which needs a human decision)
    and filesystem failures while moving or linking files.
    """


class MutationError(AgentdexError):
    """Raised when an entity write operation fails.

    Covers copy, symlink, rename, delete, duplicate and create operations.
    """


class InvalidNameError(MutationError):
    """Raised when a requested entity name is not a safe file name."""


class TargetExistsError(MutationError):
    """Raised when a write would overwrite an existing file or link."""


class EntityNotFoundError(MutationError):
    """Raised when the source of a write operation does not exist."""
