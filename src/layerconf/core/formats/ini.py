"""INI format adapter (read-only).

INI has no arrays, no nesting beyond one section level and no typed scalars:
keys before the first section become top-level strings, each section becomes
a table of strings. Key case is preserved and ``%`` interpolation is off.
"""
from __future__ import annotations

import configparser
from typing import Any, Dict

from .base import BaseFormatAdapter, FileFormat

# Synthetic section that collects keys appearing before any header.
_ROOT_SECTION = "__layerconf_root__"
# Never matches a user section, so configparser's DEFAULT inheritance stays off.
_NO_DEFAULTS = "__layerconf_defaults__"


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in {'"', "'"}:
        return raw[1:-1]
    return raw


class IniAdapter(BaseFormatAdapter):
    format = FileFormat.INI
    writable = False
    parse_errors = (configparser.Error,)

    def _load(self, content: str) -> Any:
        parser = configparser.ConfigParser(
            interpolation=None,
            default_section=_NO_DEFAULTS,
            strict=True,
        )
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        parser.read_string(f"[{_ROOT_SECTION}]\n{content}")

        out: Dict[str, Any] = {}
        for key, raw in parser.items(_ROOT_SECTION):
            out[key] = _unquote(raw or "")
        for section in parser.sections():
            if section == _ROOT_SECTION:
                continue
            out[section] = {key: _unquote(raw or "") for key, raw in parser.items(section)}
        return out


__all__ = ["IniAdapter"]
