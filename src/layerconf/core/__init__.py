"""layerconf core: value tree, merge engine, format adapters, builder and config.

Usage:
    from layerconf.core import Config, FileFormat, Source

    config = (
        Config.builder()
        .add(Source.from_str("defaults", FileFormat.JSON, '{"port": 8080}'))
        .env("APP_", "_")
        .build()
    )
    port = config.get("port", int)
"""
from __future__ import annotations

from .builder import ConfigBuilder
from .config import MISSING, Config, as_flat_dict
from .env import EnvOverride, coerce_env_value
from .exceptions import (
    BuildError,
    CoercionError,
    EnvOverrideError,
    GetError,
    LayerconfError,
    NotFoundError,
    ParseError,
    PathConflictError,
    ReloadError,
    RootNotTableError,
    SaveError,
    SaveIOError,
    SerializeError,
    TypeMismatchError,
    UnknownSourceError,
    UnsupportedError,
    UnsupportedFormatError,
)
from .formats import (
    BaseFormatAdapter,
    FileFormat,
    FormatAdapter,
    get_format,
    register_format,
    registered_formats,
    unregister_format,
)
from .merge import merge_all, merge_values, overlay_existing
from .source import ENVIRONMENT_ID, Source
from .value import ValueKind, format_value, kind_of, lookup, to_value, values_equal

__all__ = [
    # Core
    "Config",
    "ConfigBuilder",
    "MISSING",
    "as_flat_dict",
    "Source",
    "ENVIRONMENT_ID",
    "EnvOverride",
    "coerce_env_value",
    # Formats
    "FileFormat",
    "FormatAdapter",
    "BaseFormatAdapter",
    "get_format",
    "register_format",
    "unregister_format",
    "registered_formats",
    # Values and merge
    "ValueKind",
    "kind_of",
    "to_value",
    "values_equal",
    "lookup",
    "format_value",
    "merge_values",
    "merge_all",
    "overlay_existing",
    # Errors
    "LayerconfError",
    "BuildError",
    "ParseError",
    "RootNotTableError",
    "EnvOverrideError",
    "UnsupportedFormatError",
    "PathConflictError",
    "GetError",
    "NotFoundError",
    "TypeMismatchError",
    "CoercionError",
    "ReloadError",
    "SaveError",
    "UnknownSourceError",
    "UnsupportedError",
    "SerializeError",
    "SaveIOError",
]
