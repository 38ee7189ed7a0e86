# src/storage/json_files.py — v1
"""Whole-file JSON persistence for the cache, checkpoint and error log.

Every write replaces the file contents in place. A crash in the middle of a
write can leave a truncated file behind; that surfaces as PersistenceError
on the next load instead of being silently replaced with an empty state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Reading or writing a state file failed."""

    def __init__(self, path: Path, operation: str, cause: Exception) -> None:
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation} {path}: {cause}")


def read_json(path: Path, default: Any) -> Any:
    """Load JSON from path, or return default if the file does not exist.

    Raises:
        PersistenceError: If the file exists but cannot be read or decoded.
    """
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PersistenceError(path, "read", e) from e


def write_json(path: Path, data: Any) -> None:
    """Serialize data and overwrite path.

    Raises:
        PersistenceError: On any I/O failure.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    except (OSError, TypeError) as e:
        raise PersistenceError(path, "write", e) from e


def remove_file(path: Path) -> None:
    """Delete path if present."""
    try:
        if path.exists():
            path.unlink()
    except OSError as e:
        raise PersistenceError(path, "remove", e) from e
    logger.debug("Removed %s", path)
