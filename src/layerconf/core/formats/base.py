"""Format adapter interface.

Adapters convert raw text to a value tree and back. Each adapter declares
which native exceptions its parser/serializer raise; the base class wraps
those into :class:`ParseError` / :class:`SerializeError` so callers only
ever see layerconf errors.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Optional, Protocol, Tuple, Type, runtime_checkable

from ..exceptions import ParseError, SerializeError, UnsupportedError
from ..value import to_value


class FileFormat(str, Enum):
    INI = "ini"
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    RON = "ron"

    @classmethod
    def from_extension(cls, extension: str) -> Optional["FileFormat"]:
        """Map a file extension (with or without the dot) to a format."""
        ext = extension.lower().lstrip(".")
        if ext == "yml":
            return cls.YAML
        try:
            return cls(ext)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class FormatAdapter(Protocol):
    """Protocol for format adapters."""

    format: FileFormat
    writable: bool

    def parse(self, content: str, *, source_id: str = "<string>") -> Any:
        ...

    def serialize(self, value: Any, *, sort_keys: bool = False) -> str:
        ...


class BaseFormatAdapter(ABC):
    """Base class for format adapters.

    Subclasses implement ``_load`` (and ``_dump`` when ``writable``) and list
    the native exceptions they raise in ``parse_errors``/``serialize_errors``.
    """

    format: ClassVar[FileFormat]
    writable: ClassVar[bool] = True
    parse_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()
    serialize_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()

    def parse(self, content: str, *, source_id: str = "<string>") -> Any:
        """Parse ``content`` into a value tree.

        Raises:
            ParseError: If the content is malformed or contains values that
                have no value-tree mapping.
        """
        try:
            return to_value(self._load(content))
        except ParseError:
            raise
        except (ValueError, *self.parse_errors) as exc:
            raise ParseError(source_id, exc) from exc

    def serialize(self, value: Any, *, sort_keys: bool = False) -> str:
        """Serialize a value tree to this format's text.

        Raises:
            UnsupportedError: If the adapter is read-only.
            SerializeError: If the value cannot be represented.
        """
        if not self.writable:
            raise UnsupportedError(
                f"Serializing {self.format.value.upper()} format is not supported",
                context={"format": self.format.value},
            )
        try:
            return self._dump(value, sort_keys=sort_keys)
        except SerializeError:
            raise
        except (TypeError, ValueError, *self.serialize_errors) as exc:
            raise SerializeError(
                f"Cannot serialize to {self.format.value}: {exc}",
                context={"format": self.format.value},
            ) from exc

    @abstractmethod
    def _load(self, content: str) -> Any:
        ...

    def _dump(self, value: Any, *, sort_keys: bool) -> str:
        raise NotImplementedError


__all__ = ["FileFormat", "FormatAdapter", "BaseFormatAdapter"]
