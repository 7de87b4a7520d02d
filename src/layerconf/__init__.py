"""
layerconf - layered configuration with saving

Merges JSON, YAML, INI and TOML sources, literal strings and environment
variables into one tree with typed lookups, and writes it back out.
"""

__version__ = "0.4.2"

from layerconf.core import (  # noqa: E402
    Config,
    ConfigBuilder,
    FileFormat,
    Source,
)

__all__ = ["__version__", "Config", "ConfigBuilder", "FileFormat", "Source"]
