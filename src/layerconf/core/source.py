"""Configuration sources.

A :class:`Source` is one registered input: a file on disk, a literal string
tagged with its format, or the process environment. Sources are immutable;
reloading a file-backed source produces a new instance via :meth:`refreshed`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union

from .exceptions import UnsupportedFormatError
from .formats import FileFormat
from .io import read_source

ENVIRONMENT_ID = "environment"


@dataclass(frozen=True, slots=True)
class Source:
    """One input to the builder.

    Attributes:
        identifier: Name or path; used in diagnostics and to pick a save target
        format: Format tag, or None for the environment
        content: Raw text, or None for the environment
        path: File path for file-backed sources
    """

    identifier: str
    format: Optional[FileFormat]
    content: Optional[str]
    path: Optional[Path] = None

    @classmethod
    def from_str(cls, identifier: str, fmt: Union[FileFormat, str], content: str) -> Source:
        """Wrap literal ``content`` in format ``fmt`` (no file I/O)."""
        return cls(identifier=identifier, format=FileFormat(fmt), content=content)

    @classmethod
    def from_path(cls, path: Union[str, Path], fmt: Union[FileFormat, str, None] = None) -> Source:
        """Read a file-backed source.

        The format is inferred from the extension unless ``fmt`` is given.

        Raises:
            UnsupportedFormatError: If the format cannot be inferred.
            FileNotFoundError: If the file does not exist.
            ParseError: If the file is not valid UTF-8.
        """
        p = Path(path)
        if fmt is None:
            if not p.suffix:
                raise UnsupportedFormatError(
                    f"Failed to get file extension from {p}", context={"path": str(p)}
                )
            resolved = FileFormat.from_extension(p.suffix)
            if resolved is None:
                raise UnsupportedFormatError(
                    f"Unsupported file extension: {p.suffix.lstrip('.')}",
                    context={"path": str(p)},
                )
        else:
            resolved = FileFormat(fmt)
        return cls(identifier=str(p), format=resolved, content=read_source(p, str(p)), path=p)

    @classmethod
    def environment(cls, identifier: str = ENVIRONMENT_ID) -> Source:
        return cls(identifier=identifier, format=None, content=None)

    @property
    def kind(self) -> str:
        if self.format is None:
            return "environment"
        return "file" if self.path is not None else "string"

    @property
    def is_environment(self) -> bool:
        return self.format is None

    def refreshed(self) -> Source:
        """Return this source re-read from disk (unchanged if not file-backed)."""
        if self.path is None:
            return self
        return replace(self, content=read_source(self.path, self.identifier))

    def __repr__(self) -> str:
        fmt = self.format.value if self.format is not None else "-"
        return f"Source({self.kind}:{fmt}:{self.identifier})"


__all__ = ["Source", "ENVIRONMENT_ID"]
