"""JSON format adapter."""
from __future__ import annotations

import json
from typing import Any, Dict

from .base import BaseFormatAdapter, FileFormat

# Default formatting (can be overridden per adapter instance)
DEFAULT_JSON_CONFIG: Dict[str, Any] = {
    "indent": 2,
    "ensure_ascii": False,
}


class JsonAdapter(BaseFormatAdapter):
    format = FileFormat.JSON

    def __init__(self, *, indent: int | None = None, ensure_ascii: bool | None = None) -> None:
        cfg = DEFAULT_JSON_CONFIG.copy()
        if indent is not None:
            cfg["indent"] = indent
        if ensure_ascii is not None:
            cfg["ensure_ascii"] = ensure_ascii
        self._cfg = cfg

    def _load(self, content: str) -> Any:
        # JSONDecodeError is a ValueError, wrapped by the base class.
        return json.loads(content)

    def _dump(self, value: Any, *, sort_keys: bool) -> str:
        return json.dumps(
            value,
            indent=self._cfg["indent"],
            ensure_ascii=self._cfg["ensure_ascii"],
            sort_keys=sort_keys,
            allow_nan=False,
        )


__all__ = ["JsonAdapter", "DEFAULT_JSON_CONFIG"]
