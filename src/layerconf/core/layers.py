"""Parse-and-compose pipeline shared by ``ConfigBuilder.build`` and ``Config.reload``.

Layers, lowest to highest priority:
  1) sources, in registration order (left fold)
  2) saved changes
  3) environment overrides
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from .env import EnvOverride
from .exceptions import ParseError, RootNotTableError, UnsupportedFormatError
from .formats import get_format
from .merge import merge_all, merge_values
from .source import Source
from .value import Table, clone, is_table, kind_of

logger = logging.getLogger(__name__)


def parse_source(source: Source) -> Table:
    """Parse one source into a table.

    Raises:
        ParseError: If the adapter is missing or the content is malformed.
        RootNotTableError: If the parsed top-level value is not a table.
    """
    if source.is_environment or source.format is None or source.content is None:
        raise ValueError(f"{source!r} has no content to parse")
    try:
        adapter = get_format(source.format)
    except UnsupportedFormatError as exc:
        raise ParseError(source.identifier, exc) from exc

    value = adapter.parse(source.content, source_id=source.identifier)
    if not is_table(value):
        raise RootNotTableError(source.identifier, kind=kind_of(value).value)
    logger.debug("parsed %r (%d top-level keys)", source, len(value))
    return value


def merge_sources(sources: Iterable[Source]) -> Table:
    """Parse every non-environment source in order and fold them together.

    Fail-fast: the first failing source aborts before anything is merged.
    """
    parsed: List[Table] = [parse_source(s) for s in sources if not s.is_environment]
    merged = merge_all(parsed)
    if not is_table(merged):
        raise RootNotTableError(kind=kind_of(merged).value)
    return merged


def compose(
    base: Table,
    changes: Optional[Table],
    env: Optional[EnvOverride],
    environ: Optional[Mapping[str, str]] = None,
) -> Table:
    """Layer ``changes`` then ``env`` (read from ``environ``) over a copy of ``base``."""
    root: Any = clone(base)
    if changes:
        root = merge_values(root, changes)
    if env is not None:
        env.apply(root, environ)
    if not is_table(root):
        raise RootNotTableError(kind=kind_of(root).value)
    return root


__all__ = ["parse_source", "merge_sources", "compose"]
