"""Canonical deep merge for value trees.

Merge rules (applied recursively, right = higher priority):
- Table + Table: merge key-by-key; keys only in the right are inserted in the
  right's order, shared keys recurse, keys only in the left are kept
- Array + Array: the right replaces the left entirely (arrays are atomic)
- anything else: the right replaces the left, including an explicit ``None``
  on the right (which clears the value; an absent key leaves it untouched)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from .value import clone

logger = logging.getLogger(__name__)


def merge_values(base: Any, override: Any) -> Any:
    """Recursively merge ``override`` onto ``base`` without mutating inputs.

    Args:
        base: Lower-priority value
        override: Higher-priority value

    Returns:
        New merged value

    Example:
        >>> merge_values({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
        >>> merge_values({"a": [1, 2]}, {"a": [3]})
        {'a': [3]}
    """
    if isinstance(base, dict) and isinstance(override, dict):
        result: Dict[str, Any] = clone(base)
        for key, value in override.items():
            if key in result:
                result[key] = merge_values(result[key], value)
            else:
                result[key] = clone(value)
        return result
    return clone(override)


def merge_all(values: Iterable[Any], start: Optional[Dict[str, Any]] = None) -> Any:
    """Left-fold ``values`` with :func:`merge_values`, starting from ``{}``.

    Order is significant: the last value wins on conflicts.
    """
    acc: Any = clone(start) if start is not None else {}
    for i, value in enumerate(values):
        acc = merge_values(acc, value)
        logger.debug("merged layer %d", i)
    return acc


def overlay_existing(base: Any, override: Any) -> Any:
    """Return the part of ``override`` whose paths already exist in ``base``.

    Used for saved-changes files: keys the base configuration no longer
    defines are dropped instead of resurrected. Tables are filtered
    recursively; any other value at an existing path is kept as-is.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        return clone(override)
    filtered: Dict[str, Any] = {}
    for key, value in override.items():
        if key not in base:
            logger.debug("dropping change for unknown key %r", key)
            continue
        if isinstance(base[key], dict) and isinstance(value, dict):
            filtered[key] = overlay_existing(base[key], value)
        else:
            filtered[key] = clone(value)
    return filtered


__all__ = ["merge_values", "merge_all", "overlay_existing"]
