"""Shared helpers for the JSON file stores."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(key: str) -> str:
    """Convert a PascalCase or camelCase key ("StorySummary", "HP") to snake_case."""
    if key.isupper():
        return key.lower()
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Shallow copy of ``data`` with snake_case keys; existing snake keys win."""
    converted: dict[str, Any] = {}
    for key, value in data.items():
        converted.setdefault(snake_case(str(key)), value)
    converted.update({key: value for key, value in data.items() if key == snake_case(key)})
    return converted


def read_json(path: Path) -> Any:
    """Read a JSON document.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not valid JSON.
    """
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, data: Any) -> None:
    """Overwrite ``path`` with ``data`` through a temporary sibling file.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


__all__ = [
    "read_json",
    "snake_case",
    "snake_keys",
    "write_json",
]
