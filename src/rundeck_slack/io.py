"""Input/output handling for the command line."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_input(source: str) -> Any:
    """Read execution data from a file path or inline JSON string.

    Args:
        source: Either a path to a JSON file, or an inline JSON string.

    Returns:
        The parsed JSON data.

    Raises:
        OSError: If the source looks like a path and cannot be read.
        json.JSONDecodeError: If the input is not valid JSON.
    """
    if source.lstrip().startswith(("{", "[")):
        return json.loads(source)

    with open(Path(source), encoding="utf-8") as f:
        return json.load(f)


def write_output(dest: str | Path, document: dict[str, Any]) -> None:
    """Write a message document to a JSON file.

    Args:
        dest: Path to write the JSON output.
        document: The message document to serialize.
    """
    dest_path = Path(dest)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    with open(dest_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
        f.write("\n")  # Trailing newline for POSIX compliance
