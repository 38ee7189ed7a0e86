# src/cache/json_store.py — v2
"""JSON file-based cache store (default CACHE_BACKEND=json).

The whole fingerprint -> entry map lives in one JSON object file. It is
loaded into memory at construction and rewritten in full on every put,
touch and clear (write-through). There is no locking: one writer per file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from criteriacache.cache.memory_store import MemoryCacheStore
from criteriacache.cache.models import CacheEntry
from criteriacache.storage.json_files import (
    PersistenceError,
    read_json,
    remove_file,
    write_json,
)

logger = logging.getLogger(__name__)


class JsonCacheStore(MemoryCacheStore):
    """Single-file, write-through cache store."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = Path(path).expanduser()
        self._entries = self._load()
        logger.info("Loaded %d cached entries from %s", len(self._entries), self._path)

    @property
    def path(self) -> Path:
        return self._path

    async def clear(self) -> None:
        await super().clear()
        remove_file(self._path)

    def _load(self) -> dict[str, CacheEntry]:
        raw = read_json(self._path, default={})
        if not isinstance(raw, dict):
            raise PersistenceError(
                self._path, "read", ValueError("results file is not a JSON object"),
            )
        try:
            return {key: CacheEntry.model_validate(value) for key, value in raw.items()}
        except ValidationError as e:
            raise PersistenceError(self._path, "decode", e) from e

    def _persist(self) -> None:
        write_json(
            self._path,
            {key: entry.model_dump(mode="json") for key, entry in self._entries.items()},
        )
