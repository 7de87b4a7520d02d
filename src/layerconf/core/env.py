"""Environment variable overrides.

A variable ``<prefix><a><sep><b><sep><c>=value`` overrides the config path
``a.b.c``:

- the tail after the prefix is split on the separator and lowercased
- segments match existing keys case-insensitively, so ``APP_DATABASE_URL``
  updates ``Database.url`` when that key already exists
- values are coerced: bool, int, float, JSON array/object, else stripped string
- overrides are applied last, after every file and saved change

When ``create`` is true (default) missing intermediate tables are created;
otherwise only paths that already exist are overridden.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .exceptions import EnvOverrideError, PathConflictError
from .value import Table, is_table, set_path, to_value

logger = logging.getLogger(__name__)


# ---------- Type coercion helpers ----------


def _as_bool(v: str) -> Optional[bool]:
    low = v.strip().lower()
    if low in {"true", "false"}:
        return low == "true"
    return None


def _as_int(v: str) -> Optional[int]:
    if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
        try:
            return to_value(int(v))
        except ValueError:
            return None
    return None


def _as_float(v: str) -> Optional[float]:
    s = v.strip()
    if re.fullmatch(r"[-+]?\d*\.\d+([eE][-+]?\d+)?", s) or re.fullmatch(r"[-+]?\d+\.\d*([eE][-+]?\d+)?", s):
        try:
            return float(s)
        except ValueError:
            return None
    return None


def _as_json(v: str) -> Optional[Any]:
    s = v.strip()
    if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
        try:
            return to_value(json.loads(s))
        except ValueError:
            return None
    return None


def coerce_env_value(value: str) -> Any:
    """Coerce an environment string to bool/int/float/JSON when it looks like one.

    Returns:
        Best-effort typed value. Falls back to the stripped string.
    """
    for caster in (_as_bool, _as_int, _as_float, _as_json):
        result = caster(value)
        if result is not None:
            return result
    return value.strip()


# ---------- Override ----------


@dataclass(frozen=True)
class EnvOverride:
    """Maps prefixed environment variables onto config paths.

    Attributes:
        prefix: Variable name prefix (case-sensitive), e.g. ``APP_``
        separator: Path separator inside the name, e.g. ``_`` or ``__``
        strict: Raise :class:`EnvOverrideError` on malformed keys or path
            conflicts instead of logging and skipping them
        create: Create missing intermediate tables (path-creating mode)
        environ: Explicit mapping; ``None`` snapshots ``os.environ`` on use
    """

    prefix: str
    separator: str = "_"
    strict: bool = False
    create: bool = True
    environ: Optional[Mapping[str, str]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("EnvOverride separator must not be empty")

    def snapshot(self) -> Dict[str, str]:
        """Return the variable mapping this override reads from."""
        source = os.environ if self.environ is None else self.environ
        return {k: str(v) for k, v in source.items()}

    def parse_key(self, name: str) -> List[str]:
        """Split a variable name into lowercase path segments.

        Returns an empty list when ``name`` does not carry the prefix, or when
        it is malformed and ``strict`` is off.
        """
        if not name.startswith(self.prefix):
            return []
        raw = name[len(self.prefix):]
        if not raw:
            return self._malformed(name, "empty tail after prefix")
        segments = raw.split(self.separator)
        if any(seg == "" for seg in segments):
            return self._malformed(name, "empty path segment")
        return [seg.lower() for seg in segments]

    def _malformed(self, name: str, reason: str) -> List[str]:
        if self.strict:
            raise EnvOverrideError(
                f"Malformed environment override '{name}': {reason}",
                context={"variable": name},
            )
        logger.warning("Skipping environment override %s: %s", name, reason)
        return []

    def iter_overrides(self, environ: Optional[Mapping[str, str]] = None) -> Iterator[Tuple[List[str], Any, str]]:
        """Yield ``(segments, typed_value, variable_name)`` in sorted name order."""
        env = self.snapshot() if environ is None else environ
        for name in sorted(env):
            segments = self.parse_key(name)
            if not segments:
                continue
            yield segments, coerce_env_value(env[name]), name

    def collect(self, environ: Optional[Mapping[str, str]] = None) -> Table:
        """Build a table solely from the environment (useful for diagnostics)."""
        overrides: Table = {}
        for segments, value, name in self.iter_overrides(environ):
            try:
                set_path(overrides, segments, value)
            except PathConflictError as exc:
                self._conflict(name, exc)
        return overrides

    def apply(self, cfg: Table, environ: Optional[Mapping[str, str]] = None) -> Table:
        """Apply overrides in-place to ``cfg`` and return it."""
        for segments, value, name in self.iter_overrides(environ):
            resolved = _resolve_case(cfg, segments)
            try:
                applied = set_path(cfg, resolved, value, create=self.create)
            except PathConflictError as exc:
                self._conflict(name, exc)
                continue
            if applied:
                logger.debug("environment override %s -> %s", name, ".".join(resolved))
            else:
                logger.debug("environment override %s ignored: path does not exist", name)
        return cfg

    def _conflict(self, name: str, exc: PathConflictError) -> None:
        if self.strict:
            raise EnvOverrideError(
                f"Environment override '{name}' conflicts with configuration: {exc}",
                context={"variable": name},
            ) from exc
        logger.warning("Skipping environment override %s: %s", name, exc)


def _resolve_case(cfg: Table, segments: List[str]) -> List[str]:
    """Map lowercase segments onto the casing of keys that already exist."""
    resolved: List[str] = []
    cur: Any = cfg
    for seg in segments:
        if is_table(cur):
            key_candidates = {k.lower(): k for k in cur.keys()}
            key = key_candidates.get(seg, seg)
            resolved.append(key)
            cur = cur.get(key)
        elif isinstance(cur, list) and seg.isdigit() and int(seg) < len(cur):
            resolved.append(seg)
            cur = cur[int(seg)]
        else:
            resolved.append(seg)
            cur = None
    return resolved


__all__ = ["EnvOverride", "coerce_env_value"]
