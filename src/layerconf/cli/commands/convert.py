"""
layerconf convert command.

SUMMARY: Merge files and write the result in another format

Writes to --output atomically, or to stdout when no output path is given.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from layerconf.cli import OutputFormatter, add_json_flag, add_source_args, build_config
from layerconf.core import FileFormat, LayerconfError, UnsupportedError, get_format
from layerconf.core.io import write_text

SUMMARY = "Merge files and write the result in another format"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_source_args(parser)
    parser.add_argument(
        "--to",
        dest="target_format",
        required=True,
        choices=[f.value for f in FileFormat],
        help="Output format",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write to this path instead of stdout",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        config = build_config(args)
        fmt = FileFormat(args.target_format)
        try:
            adapter = get_format(fmt)
        except LayerconfError as exc:
            raise UnsupportedError(str(exc)) from exc
        text = adapter.serialize(config.to_dict(), sort_keys=not config.ordered)

        if args.output:
            out = Path(args.output)
            write_text(out, text)
            if formatter.json_mode:
                formatter.json_output({"status": "success", "output": str(out), "format": fmt.value})
            else:
                formatter.text(f"Wrote {out}")
        else:
            sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return 0

    except (LayerconfError, OSError) as e:
        formatter.error(e, error_code="convert_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
