"""
layerconf CLI package.

Commands are auto-discovered from ``layerconf/cli/commands``: each module
exposes ``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
"""
from ._output import OutputFormatter
from ._args import add_json_flag, add_source_args, build_config

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_source_args",
    "build_config",
]
