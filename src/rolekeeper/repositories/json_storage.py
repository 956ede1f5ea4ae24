"""
Whole-document JSON persistence.

Files are rewritten in full on every save. Writes go to a sibling ``.tmp``
file that is then moved over the target with :func:`os.replace`, so readers
only ever see a complete document.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from rolekeeper.util.logger import get_logger

logger = get_logger("json_storage")


def read_json(path: Path) -> Dict[str, Any]:
    """Load a JSON object from ``path``.

    Returns an empty dict when the file does not exist or is empty. A file
    that exists but does not hold a JSON object raises ``ValueError``.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = f.read().strip()
    except FileNotFoundError:
        return {}

    if not raw:
        return {}

    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """Serialize ``data`` to ``path`` through a temporary file and an atomic rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)
    logger.debug("Wrote %s", path)
