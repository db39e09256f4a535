"""Nested-dict helpers used by the configuration layer."""

from __future__ import annotations

from typing import Any


def deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` onto ``base`` recursively; values from ``override`` win."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def nest_dunder_keys(flat: dict[str, Any], separator: str = "__") -> dict[str, Any]:
    """
    Expand ``section__field`` keys into nested dictionaries.

    Example::

        {"search__min_score": 0.6}  ->  {"search": {"min_score": 0.6}}
    """
    nested: dict[str, Any] = {}
    for key, value in flat.items():
        *parents, leaf = key.split(separator)
        node = nested
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return nested
