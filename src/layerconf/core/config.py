"""The built configuration.

A :class:`Config` owns the merged value tree and answers typed queries.
It is produced by :class:`~layerconf.core.builder.ConfigBuilder` and can be
reloaded in place or persisted through one of its sources' adapters.

Layers, lowest to highest priority:
  1) sources, in registration order
  2) changes (``set()`` calls and loaded saved-changes files)
  3) environment overrides
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .coercion import coerce
from .env import EnvOverride
from .exceptions import (
    BuildError,
    NotFoundError,
    ReloadError,
    SaveIOError,
    UnknownSourceError,
    UnsupportedError,
    UnsupportedFormatError,
)
from .formats import FileFormat, get_format
from .io import write_text
from .layers import compose, merge_sources
from .merge import merge_values
from .source import Source
from .value import (
    Table,
    clone,
    format_value,
    has_path,
    lookup,
    parse_path,
    set_path,
    to_value,
    values_equal,
)

if TYPE_CHECKING:
    from .builder import ConfigBuilder

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class Config:
    """Merged configuration with typed accessors.

    Not safe for concurrent mutation: ``reload()`` and ``set()`` replace the
    root and must be externally synchronized against readers.
    """

    def __init__(
        self,
        root: Table,
        *,
        base: Optional[Table] = None,
        sources: Iterable[Source] = (),
        changes: Optional[Table] = None,
        env: Optional[EnvOverride] = None,
        environ: Optional[Mapping[str, str]] = None,
        ordered: bool = False,
    ) -> None:
        self._root: Table = root
        self._base: Table = base if base is not None else clone(root)
        self._sources: Tuple[Source, ...] = tuple(sources)
        self._changes: Table = changes if changes is not None else {}
        self._env = env
        self._environ = environ
        self.ordered = ordered

    @classmethod
    def builder(cls, *, ordered: bool = False) -> ConfigBuilder:
        """Create a :class:`ConfigBuilder`."""
        # Lazy import to avoid circular dependencies
        from .builder import ConfigBuilder

        return ConfigBuilder(ordered=ordered)

    # ---------- Queries ----------

    @property
    def sources(self) -> Tuple[Source, ...]:
        return self._sources

    def get(self, path: str, type_: Any = None, *, default: Any = MISSING) -> Any:
        """Look up ``path`` and coerce the value to ``type_``.

        Args:
            path: Dotted path; numeric segments index arrays (``hosts.0``)
            type_: Requested type. ``None`` returns a copy of the raw value.
            default: Returned instead of raising when the path is missing.

        Raises:
            NotFoundError: Path missing and no default given.
            TypeMismatchError: No conversion from the stored kind to ``type_``.
            CoercionError: Conversion exists but this value does not convert.
        """
        try:
            value = lookup(self._root, path)
        except NotFoundError:
            if default is not MISSING:
                return default
            raise
        return coerce(value, type_, path=path)

    def get_value(self, path: str) -> Any:
        """Return the raw stored value at ``path`` (not copied; do not mutate)."""
        return lookup(self._root, path)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and has_path(self._root, path)

    def keys(self) -> List[str]:
        """Top-level keys (insertion order when ordered, otherwise sorted)."""
        keys = list(self._root.keys())
        return keys if self.ordered else sorted(keys)

    def to_dict(self) -> Table:
        """Deep copy of the merged tree."""
        return clone(self._root)

    def changes(self) -> Table:
        """Deep copy of the changes layer."""
        return clone(self._changes)

    def __str__(self) -> str:
        return "".join(f"{key}: {format_value(self._root[key])}\n" for key in self.keys())

    def __repr__(self) -> str:
        return f"Config(keys={self.keys()!r}, sources={len(self._sources)})"

    # ---------- Mutation ----------

    def set(self, path: str, value: Any) -> None:
        """Record ``value`` at ``path`` in the changes layer and recompose.

        An environment override on the same path still takes precedence.

        Raises:
            ValueError: If ``value`` is not representable as a config value.
            PathConflictError: If ``path`` traverses a scalar in the changes layer.
        """
        segments = parse_path(path)
        if not segments:
            raise ValueError("Cannot set the root; set individual keys instead")
        changes = clone(self._changes)
        normalized = to_value(value)
        _seed_arrays(changes, merge_values(self._base, changes), segments)
        set_path(changes, segments, normalized)
        root = compose(self._base, changes, self._env, self._environ)
        self._changes = changes
        self._root = root
        if has_path(root, path) and not values_equal(lookup(root, path), normalized):
            logger.warning("Value set at %s is shadowed by an environment override", path)

    def reload(self) -> None:
        """Re-read and re-merge every source, replacing the tree atomically.

        File-backed sources are re-read from disk and the environment is
        snapshotted again (unless an explicit mapping was given). On any
        failure the previous state is kept untouched.

        Raises:
            ReloadError: Wrapping the underlying parse/read failure.
        """
        try:
            refreshed = [s.refreshed() for s in self._sources]
            base = merge_sources(refreshed)
            environ = self._env.snapshot() if self._env is not None else None
            root = compose(base, self._changes, self._env, environ)
        except (BuildError, OSError) as exc:
            logger.warning("Reload failed, keeping previous configuration: %s", exc)
            raise ReloadError(f"Reload failed: {exc}", context={"cause": type(exc).__name__}) from exc

        self._sources = tuple(refreshed)
        self._base = base
        self._environ = environ
        self._root = root
        logger.debug("reloaded config from %d source(s)", len(refreshed))

    # ---------- Persistence ----------

    def _find_source(self, source_id: str) -> Source:
        # Last registered wins, mirroring merge precedence.
        for source in reversed(self._sources):
            if source.identifier == source_id:
                return source
        raise UnknownSourceError(source_id)

    def _serialize(self, fmt: FileFormat, value: Table, source_id: str) -> str:
        try:
            adapter = get_format(fmt)
        except UnsupportedFormatError as exc:
            raise UnsupportedError(str(exc), context={"source_id": source_id}) from exc
        if not adapter.writable:
            raise UnsupportedError(
                f"Serializing {fmt.value.upper()} format is not supported",
                context={"source_id": source_id, "format": fmt.value},
            )
        return adapter.serialize(value, sort_keys=not self.ordered)

    def save(self, source_id: str) -> str:
        """Serialize the current tree with the adapter of source ``source_id``.

        File-backed sources are rewritten atomically. In-memory state is not
        changed.

        Returns:
            The serialized text.

        Raises:
            UnknownSourceError: No registered source has that identifier.
            UnsupportedError: The source cannot serialize (environment,
                read-only format, or no adapter registered).
            SerializeError: The tree cannot be represented in that format.
            SaveIOError: Writing the file failed.
        """
        source = self._find_source(source_id)
        if source.format is None:
            raise UnsupportedError(
                f"Source {source_id} ({source.kind}) cannot be saved",
                context={"source_id": source_id},
            )
        text = self._serialize(source.format, self._root, source_id)

        if source.path is not None:
            try:
                write_text(source.path, text)
            except OSError as exc:
                raise SaveIOError(
                    f"Failed to write {source.path}: {exc}",
                    context={"source_id": source_id, "path": str(source.path)},
                ) from exc
            logger.info("saved configuration to %s", source.path)
        return text

    def export_changes(self, fmt: FileFormat | str) -> str:
        """Serialize only the changes layer, for later :meth:`ConfigBuilder.load`."""
        fmt = FileFormat(fmt)
        return self._serialize(fmt, self._changes, f"<changes:{fmt.value}>")


def _seed_arrays(changes: Table, current: Table, segments: List[str]) -> None:
    """Copy Arrays crossed by ``segments`` from ``current`` into ``changes``.

    Arrays merge atomically, so a numeric segment must index a full copy of
    the Array rather than create a Table keyed ``"0"`` that would replace it.
    """
    for i in range(1, len(segments)):
        prefix = ".".join(segments[:i])
        if not has_path(current, prefix):
            return
        node = lookup(current, prefix)
        if isinstance(node, list) and not (has_path(changes, prefix) and isinstance(lookup(changes, prefix), list)):
            set_path(changes, segments[:i], clone(node))


def as_flat_dict(config: Config) -> Dict[str, Any]:
    """Flatten the tree to ``{"a.b.0": value}`` leaves (empty containers kept)."""
    out: Dict[str, Any] = {}

    def _walk(prefix: str, node: Any) -> None:
        if isinstance(node, dict) and node:
            for k, v in node.items():
                _walk(f"{prefix}.{k}" if prefix else k, v)
        elif isinstance(node, list) and node:
            for i, v in enumerate(node):
                _walk(f"{prefix}.{i}" if prefix else str(i), v)
        else:
            out[prefix] = clone(node)

    _walk("", config.to_dict())
    return out


__all__ = ["Config", "MISSING", "as_flat_dict"]
