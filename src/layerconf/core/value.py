"""Value tree primitives.

Every source is converted into the same tree before merging:

- ``None`` (Null), ``bool``, ``int`` (signed 64-bit), ``float``, ``str``
- ``list`` (Array) of values
- ``dict`` (Table) mapping ``str`` keys to values

Native Python containers are used directly; :func:`kind_of` classifies a node
into the closed :class:`ValueKind` set so that coercion and merge rules can be
written as explicit tables instead of ad-hoc ``isinstance`` chains.

Paths are dot-separated. Table segments are keys; Array segments must be
decimal indices (``servers.0.host``).
"""
from __future__ import annotations

import copy
import datetime as _dt
import math
from enum import Enum
from typing import Any, Dict, List, Mapping

from .exceptions import NotFoundError, PathConflictError

Value = Any
Table = Dict[str, Any]
Array = List[Any]

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


class ValueKind(str, Enum):
    NULL = "Null"
    BOOL = "Bool"
    INT = "Int"
    FLOAT = "Float"
    STRING = "String"
    ARRAY = "Array"
    TABLE = "Table"


def kind_of(value: Value) -> ValueKind:
    """Classify ``value`` into its :class:`ValueKind`.

    ``bool`` is checked before ``int`` because it is an ``int`` subclass.

    Raises:
        TypeError: If ``value`` is not a value tree node.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.TABLE
    raise TypeError(f"Not a config value: {type(value).__name__}")


def is_table(value: Value) -> bool:
    return isinstance(value, dict)


def to_value(native: Any) -> Value:
    """Normalize adapter output (or user input) into a value tree.

    - tuples/sets become lists
    - mapping keys are stringified
    - dates and times become ISO-8601 strings
    - ints outside the signed 64-bit range are rejected

    Raises:
        ValueError: If the input contains something that has no value mapping.
    """
    if native is None or isinstance(native, (bool, str, float)):
        return native
    if isinstance(native, int):
        if not INT_MIN <= native <= INT_MAX:
            raise ValueError(f"Integer out of 64-bit range: {native}")
        return int(native)
    if isinstance(native, Mapping):
        return {str(k): to_value(v) for k, v in native.items()}
    if isinstance(native, (list, tuple)):
        return [to_value(v) for v in native]
    if isinstance(native, (set, frozenset)):
        return [to_value(v) for v in sorted(native, key=repr)]
    if isinstance(native, (_dt.datetime, _dt.date, _dt.time)):
        return native.isoformat()
    raise ValueError(f"Unsupported value type: {type(native).__name__}")


def clone(value: Value) -> Value:
    """Deep copy a value tree."""
    return copy.deepcopy(value)


def values_equal(a: Value, b: Value) -> bool:
    """Kind-aware structural equality (``1``, ``1.0`` and ``True`` all differ)."""
    ka, kb = kind_of(a), kind_of(b)
    if ka is not kb:
        return False
    if ka is ValueKind.TABLE:
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if ka is ValueKind.ARRAY:
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if ka is ValueKind.FLOAT and math.isnan(a) and math.isnan(b):
        return True
    return a == b


# ---------- Paths ----------


def parse_path(path: str) -> List[str]:
    """Split a dotted path into segments.

    The empty string addresses the root. Empty segments (``a..b``, ``.a``)
    are rejected with :class:`NotFoundError` since they can never resolve.
    """
    if path == "":
        return []
    segments = path.split(".")
    if any(seg == "" for seg in segments):
        raise NotFoundError(path, segment="")
    return segments


def _index(segment: str) -> int | None:
    return int(segment) if segment.isascii() and segment.isdigit() else None


def lookup(root: Value, path: str) -> Value:
    """Return the node at ``path`` (not copied).

    Raises:
        NotFoundError: When any segment is absent or cannot be applied to the
            node it meets (a key on an Array, an index out of range, or any
            segment on a scalar).
    """
    node = root
    for segment in parse_path(path):
        if isinstance(node, dict):
            if segment not in node:
                raise NotFoundError(path, segment=segment)
            node = node[segment]
        elif isinstance(node, list):
            idx = _index(segment)
            if idx is None or idx >= len(node):
                raise NotFoundError(path, segment=segment)
            node = node[idx]
        else:
            raise NotFoundError(path, segment=segment)
    return node


def has_path(root: Value, path: str) -> bool:
    try:
        lookup(root, path)
    except NotFoundError:
        return False
    return True


def set_path(root: Table, segments: List[str], value: Value, *, create: bool = True) -> bool:
    """Assign ``value`` at ``segments`` inside ``root`` (mutates ``root``).

    Missing intermediate tables are created when ``create`` is true. Array
    nodes along the way are indexed by numeric segments.

    Returns:
        True when the assignment happened, False when ``create`` is false and
        the path does not already exist.

    Raises:
        PathConflictError: When the path traverses a scalar, or indexes an
            Array with a non-numeric segment.
    """
    if not segments:
        raise PathConflictError("Cannot assign to the root")

    dotted = ".".join(segments)
    cur: Value = root
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        if isinstance(cur, dict):
            if last:
                if not create and segment not in cur:
                    return False
                cur[segment] = value
                return True
            if segment not in cur:
                if not create:
                    return False
                cur[segment] = {}
            cur = cur[segment]
        elif isinstance(cur, list):
            idx = _index(segment)
            if idx is None:
                raise PathConflictError(
                    f"Array index must be numeric (path='{dotted}', segment='{segment}')",
                    context={"path": dotted},
                )
            if idx >= len(cur):
                if not create:
                    return False
                cur.extend([None] * (idx + 1 - len(cur)))
            if last:
                cur[idx] = value
                return True
            if cur[idx] is None:
                if not create:
                    return False
                cur[idx] = {}
            cur = cur[idx]
        else:
            raise PathConflictError(
                f"Path traverses non-container value (path='{dotted}', "
                f"got {kind_of(cur).value} at '{'.'.join(segments[:i])}')",
                context={"path": dotted},
            )
    return True


# ---------- Display ----------


def format_value(value: Value) -> str:
    """Render a value for humans: ``null``, ``"text"``, ``2``, ``1.5``, ``[a, b]``, ``{(k: v)}``."""
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return "null"
    if kind is ValueKind.BOOL:
        return "true" if value else "false"
    if kind is ValueKind.STRING:
        return f'"{value}"'
    if kind is ValueKind.ARRAY:
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if kind is ValueKind.TABLE:
        return "{" + ", ".join(f"({k}: {format_value(v)})" for k, v in value.items()) + "}"
    if kind is ValueKind.FLOAT:
        # Integral floats render without a fraction: 2.0 -> "2".
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


__all__ = [
    "Value",
    "Table",
    "Array",
    "ValueKind",
    "kind_of",
    "is_table",
    "to_value",
    "clone",
    "values_equal",
    "parse_path",
    "lookup",
    "has_path",
    "set_path",
    "format_value",
]
