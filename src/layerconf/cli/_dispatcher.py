"""
Auto-discovery CLI dispatcher for layerconf.

Every public module in ``layerconf.cli.commands`` becomes a subcommand named
after the module. A command module defines ``SUMMARY``, ``register_args`` and
``main``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import pkgutil
import sys
from functools import lru_cache
from importlib import metadata
from types import ModuleType

from layerconf.cli import commands as _commands_pkg

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, ModuleType]:
    """Import command modules, keyed by command name (sorted)."""
    found: dict[str, ModuleType] = {}
    for info in sorted(pkgutil.iter_modules(_commands_pkg.__path__), key=lambda i: i.name):
        if info.name.startswith("_") or info.ispkg:
            continue
        module = importlib.import_module(f"{_commands_pkg.__name__}.{info.name}")
        if not callable(getattr(module, "main", None)):
            logger.warning("command module %s has no main(); skipped", info.name)
            continue
        found[info.name] = module
    return found


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one subparser per discovered command."""
    parser = argparse.ArgumentParser(
        prog="layerconf",
        description="Merge layered configuration files and inspect or convert the result.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log parse/merge details to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands", metavar="<command>")
    for name, module in discover_commands().items():
        sub = subparsers.add_parser(
            name,
            help=getattr(module, "SUMMARY", name),
            description=module.__doc__,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        register = getattr(module, "register_args", None)
        if register is not None:
            register(sub)
        sub.set_defaults(_func=module.main)
    return parser


def _get_version() -> str:
    try:
        return metadata.version("layerconf")
    except metadata.PackageNotFoundError:
        from layerconf import __version__

        return __version__


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``layerconf`` console script; returns the exit code."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    func = getattr(args, "_func", None)
    if func is None:
        parser.print_help()
        return 0
    return int(func(args) or 0)


if __name__ == "__main__":
    sys.exit(main())
