"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse
from pathlib import Path

from layerconf.core import Config, ConfigBuilder, Source


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_source_args(parser: argparse.ArgumentParser) -> None:
    """Add positional source files plus env/ordering options."""
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Configuration files, lowest priority first (format from extension)",
    )
    parser.add_argument(
        "--env-prefix",
        help="Apply environment overrides for variables with this prefix (e.g. APP_)",
    )
    parser.add_argument(
        "--env-separator",
        default="_",
        help="Path separator inside environment variable names (default: _)",
    )
    parser.add_argument(
        "--ordered",
        action="store_true",
        help="Preserve key insertion order instead of sorting output",
    )


def build_config(args: argparse.Namespace) -> Config:
    """Build a Config from the arguments registered by :func:`add_source_args`."""
    builder = ConfigBuilder(ordered=bool(getattr(args, "ordered", False)))
    for file in args.files:
        builder.add(Source.from_path(Path(file)))
    if getattr(args, "env_prefix", None):
        builder.env(args.env_prefix, args.env_separator)
    return builder.build()


__all__ = ["add_json_flag", "add_source_args", "build_config"]
