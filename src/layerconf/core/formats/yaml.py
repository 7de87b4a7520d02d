"""YAML format adapter (PyYAML, safe loader/dumper only)."""
from __future__ import annotations

from typing import Any

import yaml

from .base import BaseFormatAdapter, FileFormat


class _LiteralDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _str_representer)


class YamlAdapter(BaseFormatAdapter):
    format = FileFormat.YAML
    parse_errors = (yaml.YAMLError,)
    serialize_errors = (yaml.YAMLError,)

    def _load(self, content: str) -> Any:
        data = yaml.safe_load(content)
        # An empty document is an empty table, not null.
        return {} if data is None else data

    def _dump(self, value: Any, *, sort_keys: bool) -> str:
        return yaml.dump(
            value,
            Dumper=_LiteralDumper,
            default_flow_style=False,
            sort_keys=sort_keys,
            allow_unicode=True,
        )


__all__ = ["YamlAdapter"]
