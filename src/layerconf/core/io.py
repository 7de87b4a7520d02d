"""File I/O for path-backed sources.

``write_text`` is the crash-safe write behind ``Config.save`` and
``layerconf convert --output``; ``read_source`` loads a source file and
reports undecodable bytes as a parse failure of that source.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Union

from .exceptions import ParseError

PathLike = Union[str, Path]


def write_text(path: PathLike, content: str, *, encoding: str = "utf-8") -> None:
    """Atomically replace ``path`` with ``content``.

    The text goes to a locked temp file in the target directory, is fsync'd
    and then renamed over ``path``; readers see the old file or the new one,
    never a partial write. Missing parent directories are created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def read_source(path: PathLike, identifier: str, *, encoding: str = "utf-8") -> str:
    """Read the text of a path-backed source.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ParseError: If the bytes are not valid ``encoding``.
        OSError: For any other read failure.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return path.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        raise ParseError(identifier, exc) from exc


__all__ = ["PathLike", "write_text", "read_source"]
