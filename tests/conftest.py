import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'layerconf'
for p in (SRC_ROOT,):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from layerconf.core import formats as _formats


@pytest.fixture(autouse=True)
def restore_format_registry():
    """Undo register_format/unregister_format calls made by a test."""
    saved: Dict = dict(_formats._FORMAT_REGISTRY)
    yield
    _formats._FORMAT_REGISTRY.clear()
    _formats._FORMAT_REGISTRY.update(saved)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``content`` to ``tmp_path/name`` and return the path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
