from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class LayerconfError(Exception):
    """Base exception for layerconf."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


# ---------- Build ----------


class BuildError(LayerconfError):
    """Raised when sources cannot be assembled into a Config."""


class ParseError(BuildError, ValueError):
    """Raised when a source's content cannot be parsed by its format adapter."""

    def __init__(self, source_id: str, cause: BaseException | str) -> None:
        self.source_id = source_id
        self.cause = cause
        BuildError.__init__(
            self,
            f"Failed to parse source {source_id}: {cause}",
            context={"source_id": source_id},
        )


class RootNotTableError(BuildError, TypeError):
    """Raised when a source (or the merged result) is not a table at the top level."""

    def __init__(self, source_id: Optional[str] = None, *, kind: str = "") -> None:
        self.source_id = source_id
        where = f"source {source_id}" if source_id else "merged configuration"
        got = f" (got {kind})" if kind else ""
        BuildError.__init__(
            self,
            f"Root of {where} must be a table{got}",
            context={"source_id": source_id, "kind": kind},
        )


class EnvOverrideError(BuildError, ValueError):
    """Raised for malformed environment overrides when strict mode is enabled."""


class UnsupportedFormatError(LayerconfError, ValueError):
    """Raised when no adapter is registered for a format or an extension is unknown."""


class PathConflictError(LayerconfError, ValueError):
    """Raised when assigning through a path that traverses a non-container value."""


# ---------- Query ----------


class GetError(LayerconfError):
    """Base class for query-time failures; always safe to retry with another path/type."""

    def __init__(self, message: str, *, path: str, context: Mapping[str, Any] | None = None) -> None:
        self.path = path
        ctx = dict(context or {})
        ctx["path"] = path
        super().__init__(message, context=ctx)


class NotFoundError(GetError, LookupError):
    """Raised when a path does not resolve to a value."""

    def __init__(self, path: str, *, segment: str | None = None) -> None:
        msg = f"Key not found: {path}"
        if segment is not None and segment != path:
            msg += f" (at segment '{segment}')"
        GetError.__init__(self, msg, path=path, context={"segment": segment})


class TypeMismatchError(GetError, TypeError):
    """Raised when a found value has no conversion to the requested type."""

    def __init__(self, path: str, kind: str, target: str, *, reason: str = "") -> None:
        self.kind = kind
        self.target = target
        msg = f"Cannot convert {kind} to {target} at '{path}'"
        if reason:
            msg += f": {reason}"
        GetError.__init__(self, msg, path=path, context={"kind": kind, "target": target})


class CoercionError(GetError, ValueError):
    """Raised when a conversion rule applies but the value does not convert."""

    def __init__(self, path: str, kind: str, target: str, *, value: Any = None) -> None:
        self.kind = kind
        self.target = target
        GetError.__init__(
            self,
            f"Cannot coerce {kind} {value!r} to {target} at '{path}'",
            path=path,
            context={"kind": kind, "target": target},
        )


# ---------- Reload ----------


class ReloadError(LayerconfError):
    """Raised when reload fails; the previous configuration is kept."""


# ---------- Save ----------


class SaveError(LayerconfError):
    """Base class for persistence failures."""


class UnknownSourceError(SaveError, LookupError):
    """Raised when no registered source has the requested identifier."""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        SaveError.__init__(self, f"Unknown source: {source_id}", context={"source_id": source_id})


class UnsupportedError(SaveError):
    """Raised when the target source cannot serialize."""


class SerializeError(SaveError, ValueError):
    """Raised when a value cannot be represented in the target format."""


class SaveIOError(SaveError):
    """Raised when writing a file-backed source fails."""


__all__ = [
    "LayerconfError",
    "BuildError",
    "ParseError",
    "RootNotTableError",
    "EnvOverrideError",
    "UnsupportedFormatError",
    "PathConflictError",
    "GetError",
    "NotFoundError",
    "TypeMismatchError",
    "CoercionError",
    "ReloadError",
    "SaveError",
    "UnknownSourceError",
    "UnsupportedError",
    "SerializeError",
    "SaveIOError",
]
