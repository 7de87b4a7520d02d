"""
layerconf get command.

SUMMARY: Get one typed value from merged configuration

Exit code 1 when the key is missing or cannot be converted to --type.
"""

from __future__ import annotations

import argparse
import sys

from layerconf.cli import OutputFormatter, add_json_flag, add_source_args, build_config
from layerconf.core import LayerconfError, format_value

SUMMARY = "Get one typed value from merged configuration"

TYPES = {
    "any": None,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
}


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_source_args(parser)
    parser.add_argument(
        "--key",
        required=True,
        help="Dotted key to read (e.g., 'servers.0.host')",
    )
    parser.add_argument(
        "--type",
        dest="type_name",
        choices=sorted(TYPES),
        default="any",
        help="Convert the value to this type (default: any)",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        config = build_config(args)
        value = config.get(args.key, TYPES[args.type_name])
    except (LayerconfError, OSError) as e:
        formatter.error(e, error_code="get_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({args.key: value})
    elif isinstance(value, str):
        # Raw strings print unquoted so shell callers can use them directly.
        formatter.text(value)
    else:
        formatter.text(format_value(value))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
