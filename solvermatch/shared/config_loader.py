"""
Configuration loading — YAML overrides applied to Pydantic model defaults.

YAML files may declare ``extends: <filename>`` to inherit from another YAML in
the same directory; the current file's values always win.
"""

from pathlib import Path
from typing import Any

import yaml

from solvermatch.shared.config import Config
from solvermatch.shared.dicts import deep_merge_dicts, nest_dunder_keys


def load_config(path: str | Path | None = None, **overrides: Any) -> Config:
    """
    Load configuration from an optional YAML file with optional programmatic overrides.

    Resolution order (last wins):
      1. Python field defaults
      2. YAML file (resolved via ``extends`` chain if present)
      3. Keyword overrides, ``__`` separating section and field

    Examples:
        >>> cfg = load_config()
        >>> cfg = load_config("config/matching/strict.yaml")
        >>> cfg = load_config(search__min_score=0.7, pipeline__max_workers=8)
    """
    config = Config.default()

    if path is not None:
        config = config.merge(_load_yaml(Path(path)))

    if overrides:
        config = config.merge(nest_dunder_keys(overrides))

    return config


def _load_yaml(path: Path, _seen: frozenset[Path] = frozenset()) -> dict[str, Any]:
    """Load a YAML file, resolving its ``extends`` chain recursively."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    resolved = path.resolve()
    if resolved in _seen:
        raise ValueError(f"Circular 'extends' chain at {path}")

    with open(path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    if "extends" in data:
        base_data = _load_yaml(path.parent / data.pop("extends"), _seen | {resolved})
        data = deep_merge_dicts(base_data, data)

    return data
