"""Structural-tree helpers: deep merge and canonical key ordering."""

from __future__ import annotations

import copy
from typing import Any, Mapping


def _collation_key(key: Any) -> tuple[str, str]:
    # Case-insensitive first, lowercase before uppercase on ties ("a" < "A" < "b").
    text = str(key)
    return text.casefold(), text.swapcase()


def deep_merge(target: Mapping[str, Any], overlay: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Return ``target`` with ``overlay`` merged on top, recursively.

    Nested mappings combine key by key; any other overlay value (lists
    included) replaces the target value wholesale. Neither input is mutated.

    Usage example
    -------------
        deep_merge({"a": {"x": 1}}, {"a": {"y": 2}})  # {"a": {"x": 1, "y": 2}}
    """
    merged: dict[str, Any] = dict(target)
    if not overlay:
        return merged
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_sorted(value: Any) -> Any:
    """
    Rebuild every mapping in ``value`` with its keys in collation order.

    Lists and tuples are returned as-is: neither their order nor the mappings
    they contain are touched.
    """
    if not isinstance(value, Mapping):
        return value
    return {key: build_sorted(value[key]) for key in sorted(value, key=_collation_key)}
