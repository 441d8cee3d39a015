"""CLI configuration loading.

Algorithms take explicit arguments; this configuration only supplies CLI
defaults. Resolution order for each setting:

1. CLI flag
2. Environment variable (``QG_MAX_DEPTH``, ``QG_MAX_PATHS``)
3. ``questgraph.yaml`` in the config directory
4. Built-in default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

CONFIG_FILENAME = "questgraph.yaml"

# Upper bound on paths printed by the CLI. Branching stories grow
# exponentially in path count, so an unbounded listing can flood the terminal.
DEFAULT_MAX_PATHS = 1000


class GraphConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class GraphConfig:
    """Defaults for path commands.

    Attributes:
        max_depth: Maximum edges per enumerated path. None means unbounded.
        max_paths: Maximum number of paths to list.
        compress: Compress paths by shared suffixes by default.
    """

    max_depth: int | None = None
    max_paths: int | None = DEFAULT_MAX_PATHS
    compress: bool = False

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.max_paths is not None and self.max_paths < 0:
            raise ValueError(f"max_paths must be non-negative, got {self.max_paths}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphConfig:
        """Create config from dictionary.

        Environment variables override values from *data*.

        Args:
            data: Mapping with optional ``paths`` section holding
                ``max_depth``, ``max_paths`` and ``compress``.

        Returns:
            GraphConfig instance.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        paths_data = data.get("paths", {}) or {}

        max_depth = _env_int("QG_MAX_DEPTH")
        if max_depth is None:
            max_depth = paths_data.get("max_depth")

        max_paths = _env_int("QG_MAX_PATHS")
        if max_paths is None:
            max_paths = paths_data.get("max_paths", DEFAULT_MAX_PATHS)

        compress = paths_data.get("compress", False)
        if not isinstance(compress, bool):
            raise ValueError(f"paths.compress must be true or false, got {compress!r}")

        return cls(max_depth=max_depth, max_paths=max_paths, compress=compress)


def load_graph_config(config_dir: Path) -> GraphConfig:
    """Load configuration from ``questgraph.yaml`` in *config_dir*.

    A missing file yields defaults (still subject to environment overrides).

    Args:
        config_dir: Directory that may contain ``questgraph.yaml``.

    Returns:
        GraphConfig instance.

    Raises:
        GraphConfigError: If the file exists but cannot be parsed or is invalid.
    """
    config_path = config_dir / CONFIG_FILENAME

    if not config_path.exists():
        try:
            return GraphConfig.from_dict({})
        except ValueError as e:
            raise GraphConfigError(config_path, str(e)) from e

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise GraphConfigError(config_path, "Top level must be a mapping")

        return GraphConfig.from_dict(dict(data))
    except Exception as e:
        if isinstance(e, GraphConfigError):
            raise
        raise GraphConfigError(config_path, str(e)) from e
