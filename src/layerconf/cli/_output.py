"""Unified CLI output formatting utilities.

Supports both JSON and text output modes so every command reports results
and errors the same way.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Optional

from layerconf.core.exceptions import LayerconfError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON; otherwise output text
            indent: JSON indentation level
        """
        self.json_mode = json_mode
        self.indent = indent

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Output error result to stderr.

        Args:
            error: The exception that occurred
            message: Optional human-readable message (defaults to str(error))
            error_code: Error code for JSON output
        """
        msg = message or str(error)
        if self.json_mode:
            output: dict[str, Any] = {"error": error_code, "message": msg}
            if isinstance(error, LayerconfError):
                output["detail"] = error.to_json_error()
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        """Output raw JSON data."""
        print(json.dumps(data, indent=self.indent, default=str, ensure_ascii=False))

    def text(self, message: str) -> None:
        """Output plain text message."""
        print(message)


__all__ = ["OutputFormatter"]
