"""Query-time coercion from stored values to requested Python types.

Scalar conversions are an explicit table keyed by ``(ValueKind, target)``:
a missing entry means :class:`TypeMismatchError`, an entry that fails on
the concrete value means :class:`CoercionError`. Structural targets
(``list[int]``, ``dict[str, float]``, ``Optional[T]``, dataclasses, types
with ``from_dict``/``from_value``) are decoded recursively on top of it.
"""
from __future__ import annotations

import dataclasses
import math
import re
import types
import typing
from typing import Any, Callable, Dict, Tuple, Union

from .exceptions import CoercionError, TypeMismatchError
from .value import INT_MAX, INT_MIN, ValueKind, clone, kind_of

_Rule = Callable[[Any], Any]


class _Reject(Exception):
    """Internal signal: the rule applies but this value does not convert."""


def _identity(v: Any) -> Any:
    return v


def _float_to_int(v: float) -> int:
    if not math.isfinite(v) or not v.is_integer():
        raise _Reject
    i = int(v)
    if not INT_MIN <= i <= INT_MAX:
        raise _Reject
    return i


def _str_to_bool(v: str) -> bool:
    low = v.strip().lower()
    if low == "true":
        return True
    if low == "false":
        return False
    raise _Reject


def _str_to_int(v: str) -> int:
    s = v.strip()
    if not re.fullmatch(r"[-+]?\d+", s):
        raise _Reject
    i = int(s)
    if not INT_MIN <= i <= INT_MAX:
        raise _Reject
    return i


def _str_to_float(v: str) -> float:
    try:
        f = float(v.strip())
    except ValueError:
        raise _Reject from None
    if not math.isfinite(f):
        raise _Reject
    return f


COERCIONS: Dict[Tuple[ValueKind, type], _Rule] = {
    # exact matches
    (ValueKind.BOOL, bool): _identity,
    (ValueKind.INT, int): _identity,
    (ValueKind.FLOAT, float): _identity,
    (ValueKind.STRING, str): _identity,
    (ValueKind.ARRAY, list): clone,
    (ValueKind.TABLE, dict): clone,
    # numeric widening / narrowing
    (ValueKind.INT, float): float,
    (ValueKind.FLOAT, int): _float_to_int,
    # string parsing (never the other direction)
    (ValueKind.STRING, bool): _str_to_bool,
    (ValueKind.STRING, int): _str_to_int,
    (ValueKind.STRING, float): _str_to_float,
}

_ANY_TARGETS = (None, object, Any)


def _target_name(target: Any) -> str:
    if isinstance(target, type) and not typing.get_args(target):
        return target.__name__
    return str(target).replace("typing.", "")


def _child(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def coerce(value: Any, target: Any, *, path: str = "") -> Any:
    """Convert ``value`` to ``target``.

    Args:
        value: Stored value tree node
        target: Requested type (``None``/``object``/``Any`` return a copy)
        path: Dotted path of ``value``, used in error messages

    Raises:
        TypeMismatchError: No conversion exists for this kind/target pair,
            or a structured target disagrees with the value's shape.
        CoercionError: A conversion exists but this value does not convert.
    """
    if target in _ANY_TARGETS:
        return clone(value)

    kind = kind_of(value)
    origin = typing.get_origin(target)

    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        return _coerce_union(value, kind, target, path)

    if target is type(None):
        if kind is ValueKind.NULL:
            return None
        raise TypeMismatchError(path, kind.value, "None")

    if origin is not None:
        return _coerce_generic(value, kind, target, origin, path)

    if isinstance(target, type):
        rule = COERCIONS.get((kind, target))
        if rule is not None:
            try:
                return rule(value)
            except _Reject:
                raise CoercionError(path, kind.value, target.__name__, value=value) from None
        if dataclasses.is_dataclass(target):
            return _coerce_dataclass(value, kind, target, path)
        hook = _decode_hook(target, kind)
        if hook is not None:
            return _call_hook(hook, value, kind, target, path)

    raise TypeMismatchError(path, kind.value, _target_name(target))


def _coerce_union(value: Any, kind: ValueKind, target: Any, path: str) -> Any:
    members = typing.get_args(target)
    if kind is ValueKind.NULL:
        if type(None) in members:
            return None
        raise TypeMismatchError(path, kind.value, _target_name(target))
    candidates = [m for m in members if m is not type(None)]
    last: Exception | None = None
    for member in candidates:
        try:
            return coerce(value, member, path=path)
        except (TypeMismatchError, CoercionError) as exc:
            last = exc
    if len(candidates) == 1 and last is not None:
        raise last
    raise TypeMismatchError(path, kind.value, _target_name(target))


def _coerce_generic(value: Any, kind: ValueKind, target: Any, origin: Any, path: str) -> Any:
    args = typing.get_args(target)
    if origin is list:
        if kind is not ValueKind.ARRAY:
            raise TypeMismatchError(path, kind.value, _target_name(target))
        item = args[0] if args else None
        return [coerce(v, item, path=_child(path, i)) for i, v in enumerate(value)]
    if origin is tuple:
        if kind is not ValueKind.ARRAY:
            raise TypeMismatchError(path, kind.value, _target_name(target))
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(coerce(v, args[0], path=_child(path, i)) for i, v in enumerate(value))
        if args and len(args) != len(value):
            raise TypeMismatchError(
                path, kind.value, _target_name(target),
                reason=f"expected {len(args)} items, got {len(value)}",
            )
        if not args:
            return tuple(clone(value))
        return tuple(coerce(v, a, path=_child(path, i)) for i, (v, a) in enumerate(zip(value, args)))
    if origin is dict:
        if kind is not ValueKind.TABLE:
            raise TypeMismatchError(path, kind.value, _target_name(target))
        key_type = args[0] if args else str
        item = args[1] if len(args) > 1 else None
        if key_type not in (str, Any):
            raise TypeMismatchError(path, kind.value, _target_name(target), reason="table keys are strings")
        return {k: coerce(v, item, path=_child(path, k)) for k, v in value.items()}
    raise TypeMismatchError(path, kind.value, _target_name(target))


def _coerce_dataclass(value: Any, kind: ValueKind, target: type, path: str) -> Any:
    if kind is not ValueKind.TABLE:
        raise TypeMismatchError(path, kind.value, target.__name__)
    hints = typing.get_type_hints(target)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(target):
        if not f.init:
            continue
        if f.name in value:
            kwargs[f.name] = coerce(value[f.name], hints.get(f.name, Any), path=_child(path, f.name))
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise TypeMismatchError(
                path, kind.value, target.__name__, reason=f"missing field '{f.name}'"
            )
    return target(**kwargs)


def _decode_hook(target: type, kind: ValueKind) -> Callable[[Any], Any] | None:
    if kind is ValueKind.TABLE and callable(getattr(target, "from_dict", None)):
        return target.from_dict  # type: ignore[attr-defined]
    if callable(getattr(target, "from_value", None)):
        return target.from_value  # type: ignore[attr-defined]
    return None


def _call_hook(hook: Callable[[Any], Any], value: Any, kind: ValueKind, target: type, path: str) -> Any:
    try:
        return hook(clone(value))
    except (KeyError, TypeError, ValueError) as exc:
        raise TypeMismatchError(path, kind.value, target.__name__, reason=str(exc)) from exc


__all__ = ["COERCIONS", "coerce"]
