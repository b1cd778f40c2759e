# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import json

from pathlib import Path
from typing import Any


def save_json(path: str | Path, data: Any) -> None:
    """
    Write a key, capsule or delegation artifact as JSON.

    Output is indented and key-sorted so that the same artifact always
    produces the same file. Missing parent directories are created and an
    existing file is overwritten.

    Raises:
        TypeError: If `data` is not JSON-serializable.
        OSError: If the file cannot be written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)


def load_json(path: str | Path) -> Any:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def fields_of(data: dict) -> list[str]:
    """
    Pull the hex payloads out of a constructor/fields artifact.

    Inverse of the `{"constructor": 0, "fields": [{"bytes": ...}, ...]}`
    layout written by the `to_file` helpers.

    Raises:
        ValueError: If `data` does not have that layout.
    """
    try:
        return [field["bytes"] for field in data["fields"]]
    except (KeyError, TypeError) as exc:
        raise ValueError("Expected a constructor/fields artifact") from exc
