"""Builder that collects sources and produces a :class:`Config`.

Typical usage:

```python
from layerconf import Config, FileFormat, Source

config = (
    Config.builder()
    .add(Source.from_path("defaults.yaml"))
    .add(Source.from_str("local", FileFormat.JSON, '{"debug": true}'))
    .env("APP_", "_")
    .build()
)
port = config.get("server.port", int)
```
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from .config import Config
from .env import EnvOverride
from .exceptions import ParseError, UnsupportedFormatError
from .formats import get_format
from .layers import compose, merge_sources
from .merge import merge_values, overlay_existing
from .source import ENVIRONMENT_ID, Source
from .value import Table, is_table, kind_of

logger = logging.getLogger(__name__)


class ConfigBuilder:
    """Accumulates an ordered list of sources.

    Attributes:
        ordered: When True, key order follows insertion order everywhere
            (``keys()``, ``str()``, saved files); otherwise saved output sorts
            keys. Chosen once here and carried by the built Config.
    """

    def __init__(self, *, ordered: bool = False) -> None:
        self.ordered = ordered
        self._sources: List[Source] = []
        self._env: Optional[EnvOverride] = None
        self._env_source: Optional[Source] = None
        self._changes: List[Table] = []

    @property
    def sources(self) -> List[Source]:
        """Registered sources in build order (environment last)."""
        out = list(self._sources)
        if self._env_source is not None:
            out.append(self._env_source)
        return out

    def add(self, source: Source) -> ConfigBuilder:
        """Append ``source``; later sources override earlier ones."""
        if source.is_environment:
            raise ValueError("Use env() to register environment overrides")
        self._sources.append(source)
        return self

    def env(
        self,
        prefix: str,
        separator: str = "_",
        *,
        environ: Optional[Mapping[str, str]] = None,
        strict: bool = False,
        create: bool = True,
        identifier: str = ENVIRONMENT_ID,
    ) -> ConfigBuilder:
        """Enable environment overrides.

        Always applied last regardless of the order of ``add`` calls. Calling
        it again replaces the previous settings.

        Args:
            prefix: Variable name prefix, e.g. ``APP_``
            separator: Path separator inside names, e.g. ``_`` or ``__``
            environ: Explicit mapping; default snapshots ``os.environ`` at
                build (and reload) time
            strict: Raise on malformed keys/conflicts instead of skipping
            create: Create missing intermediate tables
            identifier: Source identifier for the environment layer
        """
        self._env = EnvOverride(
            prefix=prefix,
            separator=separator,
            strict=strict,
            create=create,
            environ=environ,
        )
        self._env_source = Source.environment(identifier)
        return self

    def load(self, source: Source) -> ConfigBuilder:
        """Load saved changes (e.g. from :meth:`Config.export_changes`).

        The source is parsed immediately. At build time only keys that the
        merged sources still define are applied.

        Raises:
            ParseError: If the content is empty or malformed, or no adapter
                is registered for its format.
        """
        if source.is_environment or source.format is None:
            raise ValueError("Saved changes must come from a formatted source")
        if not (source.content or "").strip():
            raise ParseError(source.identifier, "Empty content")
        try:
            adapter = get_format(source.format)
        except UnsupportedFormatError as exc:
            raise ParseError(source.identifier, exc) from exc
        value = adapter.parse(source.content or "", source_id=source.identifier)
        if not is_table(value):
            raise ParseError(source.identifier, f"expected a table, got {kind_of(value).value}")
        self._changes.append(value)
        return self

    def build(self) -> Config:
        """Parse, merge and wrap all sources.

        Raises:
            ParseError: The first source that fails to parse (nothing merged).
            RootNotTableError: A source or the merged result is not a table.
            EnvOverrideError: Malformed env overrides in strict mode.
        """
        base = merge_sources(self._sources)
        changes: Table = {}
        for loaded in self._changes:
            changes = merge_values(changes, overlay_existing(base, loaded))

        environ = self._env.snapshot() if self._env is not None else None
        root = compose(base, changes, self._env, environ)
        logger.debug(
            "built config from %d source(s)%s",
            len(self._sources),
            " with environment overrides" if self._env is not None else "",
        )
        return Config(
            root,
            base=base,
            sources=self.sources,
            changes=changes,
            env=self._env,
            environ=environ,
            ordered=self.ordered,
        )


__all__ = ["ConfigBuilder"]
