# src/storage/error_log.py — v1
"""Append-only journal of permanent fetch failures (JSON array file)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from criteriacache.batch.models import Combination
from criteriacache.storage.json_files import PersistenceError, read_json, remove_file, write_json
from criteriacache.storage.models import ErrorRecord

logger = logging.getLogger(__name__)


class ErrorLog:
    """Error journal loaded at construction and rewritten on every append."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()
        raw = read_json(self._path, default=[])
        if not isinstance(raw, list):
            raise PersistenceError(
                self._path, "read", ValueError("error log is not a JSON array"),
            )
        try:
            self._records = [ErrorRecord.model_validate(r) for r in raw]
        except ValidationError as e:
            raise PersistenceError(self._path, "decode", e) from e

    def append(
        self,
        combination: Combination,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> ErrorRecord:
        record = ErrorRecord(
            timestamp=datetime.now(timezone.utc),
            combination=combination,
            message=message,
            context=context or {},
        )
        self._records.append(record)
        write_json(self._path, [r.model_dump(mode="json") for r in self._records])
        logger.debug("Logged failure for %s: %s", combination.id, message)
        return record

    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records = []
        remove_file(self._path)
