"""
layerconf show command.

SUMMARY: Show merged configuration

Merges the given files (and optional environment overrides) and prints the
result. The table format lists one ``dotted.path = value`` line per leaf;
--key limits output to one subtree.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

import yaml

from layerconf.cli import OutputFormatter, add_json_flag, add_source_args, build_config
from layerconf.core import Config, LayerconfError, as_flat_dict, format_value

SUMMARY = "Show merged configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_source_args(parser)
    parser.add_argument(
        "--key",
        help="Only show this dotted path (e.g., 'server.port')",
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml", "table"],
        default="table",
        help="Output format (default: table)",
    )
    add_json_flag(parser)


def _nest_key(key: str, value: Any) -> Any:
    """Wrap ``value`` so ``a.b`` renders as ``{"a": {"b": value}}``."""
    for part in reversed(key.split(".")):
        value = {part: value}
    return value


def _table_lines(config: Config, key: str | None) -> list[str]:
    flat = as_flat_dict(config)
    if key:
        flat = {p: v for p, v in flat.items() if p == key or p.startswith(key + ".")}
    paths = flat if config.ordered else sorted(flat)
    return [f"{path} = {format_value(flat[path])}" for path in paths]


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    output_format = "json" if formatter.json_mode else args.format

    try:
        config = build_config(args)
        if args.key:
            data = _nest_key(args.key, config.get(args.key))
        else:
            data = {key: config.get(key) for key in config.keys()}
    except (LayerconfError, OSError) as e:
        formatter.error(e, error_code="show_error")
        return 1

    if output_format == "json":
        formatter.json_output(data)
    elif output_format == "yaml":
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=not config.ordered, allow_unicode=True)
        formatter.text(text.rstrip())
    else:
        for line in _table_lines(config, args.key):
            formatter.text(line)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
