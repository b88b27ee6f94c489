"""Discovery configuration for agentdex.

Configuration is optional. Without a config file, discovery scans the
user's home directory with the defaults below. A YAML file may add extra
roots or tune the walk:

.. code-block:: yaml

    roots:
      - ~/code
      - /srv/projects
    max_depth: 6
    max_workers: 16
    skip_dirs:
      - .terraform

Loading Order (later overrides earlier):
    1. Built-in defaults (``DiscoveryConfig()``).
    2. Config file from ``$AGENTDEX_CONFIG`` or
       ``~/.config/agentdex/config.yaml``.
    3. Explicit overrides passed by the caller (CLI options).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from agentdex.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AGENTDEX_CONFIG"
DEFAULT_CONFIG_RELPATH = ".config/agentdex/config.yaml"

DEFAULT_MAX_DEPTH = 5
DEFAULT_MAX_WORKERS = 8

# Directories never descended into while looking for projects.
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset({
    # Build/dependency directories
    "node_modules", "target", "build", "dist", ".git", "vendor",
    "__pycache__", ".venv", "venv", "env", ".env",
    "Pods", "DerivedData", ".build", "Packages",
    # System/cache directories
    "Library", "Applications", ".Trash", ".cache", ".npm", ".cargo",
    ".rustup", ".local", ".config", "Caches", "Cache",
    # Large media directories
    "Movies", "Music", "Pictures", "Photos", "Downloads",
    ".docker", ".gradle", ".m2", ".pub-cache",
    # IDE/editor directories
    ".idea", ".vscode", ".vs",
})


@dataclass(frozen=True)
class DiscoveryConfig:
    """Settings for one discovery run.

    Attributes:
        home: Home directory holding the global tool configuration.
        roots: Extra directories to search for projects.
        include_home: Whether the home directory is itself searched for
            projects (it is never reported as a project).
        max_depth: Maximum directory depth of the project walk, per root.
        max_workers: Upper bound on concurrent extraction units.
        skip_dirs: Directory names that are never descended into.
    """

    home: Path = field(default_factory=Path.home)
    roots: tuple[Path, ...] = ()
    include_home: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    max_workers: int = DEFAULT_MAX_WORKERS
    skip_dirs: frozenset[str] = DEFAULT_SKIP_DIRS

    def scan_roots(self) -> list[Path]:
        """Return the ordered, de-duplicated list of roots to walk."""
        roots: list[Path] = []
        if self.include_home:
            roots.append(self.home)
        roots.extend(self.roots)
        return list(dict.fromkeys(roots))

    def with_overrides(self, **overrides: Any) -> DiscoveryConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def default_config_path(home: Path | None = None) -> Path:
    """Return the config file location, honouring ``$AGENTDEX_CONFIG``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return (home or Path.home()) / DEFAULT_CONFIG_RELPATH


def _expand(raw: str, home: Path) -> Path:
    if raw == "~" or raw.startswith("~/"):
        return home / raw[2:] if raw != "~" else home
    return Path(raw)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def config_from_dict(data: dict[str, Any], home: Path | None = None) -> DiscoveryConfig:
    """Build a ``DiscoveryConfig`` from a parsed YAML mapping.

    Args:
        data: Mapping with any of ``roots``, ``include_home``,
            ``max_depth``, ``max_workers``, ``skip_dirs``.
        home: Home directory override (for testing).

    Returns:
        The resulting configuration. Unknown keys are ignored with a
        warning.

    Raises:
        ConfigError: If a value has the wrong type or range.
    """
    base = DiscoveryConfig(home=home) if home is not None else DiscoveryConfig()
    known = {"roots", "include_home", "max_depth", "max_workers", "skip_dirs"}
    for key in sorted(set(data) - known):
        logger.warning("Ignoring unknown config key: %s", key)

    changes: dict[str, Any] = {}
    if "roots" in data:
        roots = data["roots"] or []
        _require(
            isinstance(roots, list) and all(isinstance(r, str) for r in roots),
            "'roots' must be a list of paths",
        )
        changes["roots"] = tuple(_expand(r, base.home) for r in roots)
    if "include_home" in data:
        _require(isinstance(data["include_home"], bool), "'include_home' must be a boolean")
        changes["include_home"] = data["include_home"]
    for key in ("max_depth", "max_workers"):
        if key in data:
            value = data[key]
            _require(
                isinstance(value, int) and not isinstance(value, bool) and value >= 1,
                f"{key!r} must be a positive integer",
            )
            changes[key] = value
    if "skip_dirs" in data:
        extra = data["skip_dirs"] or []
        _require(
            isinstance(extra, list) and all(isinstance(d, str) for d in extra),
            "'skip_dirs' must be a list of directory names",
        )
        changes["skip_dirs"] = base.skip_dirs | frozenset(extra)
    return replace(base, **changes)


def load_config(path: Path | None = None, home: Path | None = None) -> DiscoveryConfig:
    """Load the discovery configuration.

    A missing config file is not an error: the defaults are returned.

    Args:
        path: Explicit config file. Defaults to ``default_config_path()``.
        home: Home directory override (for testing).

    Returns:
        The effective ``DiscoveryConfig``.

    Raises:
        ConfigError: If the file exists but is not valid YAML or does not
            contain a mapping.
    """
    config_path = path if path is not None else default_config_path(home)
    if not config_path.is_file():
        logger.debug("No config file at %s, using defaults", config_path)
        return DiscoveryConfig(home=home) if home is not None else DiscoveryConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return config_from_dict(data, home=home)
