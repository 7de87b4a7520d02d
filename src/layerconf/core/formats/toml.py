"""TOML format adapter (tomllib to read, tomli_w to write)."""
from __future__ import annotations

import tomllib
from typing import Any

import tomli_w

from ..exceptions import SerializeError
from .base import BaseFormatAdapter, FileFormat


def _reject_nulls(value: Any, path: str = "") -> None:
    """TOML has no null; fail with the offending path instead of a bare TypeError."""
    if value is None:
        raise SerializeError(
            f"TOML cannot represent null (at '{path or '<root>'}')",
            context={"format": "toml", "path": path},
        )
    if isinstance(value, dict):
        for key, item in value.items():
            _reject_nulls(item, f"{path}.{key}" if path else key)
    elif isinstance(value, list):
        for idx, item in enumerate(value):
            _reject_nulls(item, f"{path}.{idx}" if path else str(idx))


def _sorted_tables(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _sorted_tables(value[k]) for k in sorted(value)}
    if isinstance(value, list):
        return [_sorted_tables(v) for v in value]
    return value


class TomlAdapter(BaseFormatAdapter):
    format = FileFormat.TOML

    def _load(self, content: str) -> Any:
        # TOMLDecodeError is a ValueError, wrapped by the base class.
        return tomllib.loads(content)

    def _dump(self, value: Any, *, sort_keys: bool) -> str:
        _reject_nulls(value)
        if sort_keys:
            value = _sorted_tables(value)
        return tomli_w.dumps(value)


__all__ = ["TomlAdapter"]
