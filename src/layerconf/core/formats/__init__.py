"""Format adapter interface and registry.

Adapters are looked up by :class:`FileFormat`. JSON, YAML, INI (read-only)
and TOML are registered on import; RON has a tag but no built-in adapter, so
applications that need it register their own with :func:`register_format`.
"""
from __future__ import annotations

import logging
from typing import Dict

from ..exceptions import UnsupportedFormatError
from .base import BaseFormatAdapter, FileFormat, FormatAdapter

logger = logging.getLogger(__name__)

# Registry of format adapters
_FORMAT_REGISTRY: Dict[FileFormat, FormatAdapter] = {}


def register_format(fmt: FileFormat, adapter: FormatAdapter) -> None:
    """Register (or replace) the adapter used for ``fmt``.

    Args:
        fmt: Format tag
        adapter: Adapter instance implementing parse/serialize
    """
    if not isinstance(adapter, FormatAdapter):
        raise TypeError(f"Adapter for {fmt} must implement parse/serialize")
    if fmt in _FORMAT_REGISTRY:
        logger.debug("replacing adapter for %s", fmt)
    _FORMAT_REGISTRY[FileFormat(fmt)] = adapter


def unregister_format(fmt: FileFormat) -> None:
    """Remove the adapter for ``fmt`` if one is registered."""
    _FORMAT_REGISTRY.pop(FileFormat(fmt), None)


def get_format(fmt: FileFormat) -> FormatAdapter:
    """Return the adapter registered for ``fmt``.

    Raises:
        UnsupportedFormatError: If no adapter is registered for the format.
    """
    adapter = _FORMAT_REGISTRY.get(FileFormat(fmt))
    if adapter is None:
        raise UnsupportedFormatError(
            f"{FileFormat(fmt).value.upper()} format has no registered adapter",
            context={"format": FileFormat(fmt).value},
        )
    return adapter


def registered_formats() -> list[FileFormat]:
    return sorted(_FORMAT_REGISTRY, key=lambda f: f.value)


def _register_builtin_formats() -> None:
    """Register built-in format adapters."""
    from .ini import IniAdapter
    from .json import JsonAdapter
    from .toml import TomlAdapter
    from .yaml import YamlAdapter

    register_format(FileFormat.JSON, JsonAdapter())
    register_format(FileFormat.YAML, YamlAdapter())
    register_format(FileFormat.INI, IniAdapter())
    register_format(FileFormat.TOML, TomlAdapter())


# Auto-register on import
_register_builtin_formats()


__all__ = [
    "FileFormat",
    "FormatAdapter",
    "BaseFormatAdapter",
    "register_format",
    "unregister_format",
    "get_format",
    "registered_formats",
]
