# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

Also the base for JsonCacheStore: all map logic lives here and subclasses
only decide how the map is persisted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from criteriacache.cache.base_cache_store import BaseCacheStore
from criteriacache.cache.models import CacheEntry
from criteriacache.criteria.models import NormalizedCriteria

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """Dictionary-backed cache store without persistence."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def touch(self, key: str) -> CacheEntry | None:
        current = self._entries.get(key)
        if current is None:
            return None
        updated = current.model_copy(
            update={
                "access_count": current.access_count + 1,
                "last_accessed_at": datetime.now(timezone.utc),
            },
        )
        self._commit(key, updated, previous=current)
        return updated

    async def put(
        self, key: str, payload: dict[str, Any], criteria: NormalizedCriteria,
    ) -> CacheEntry:
        now = datetime.now(timezone.utc)
        entry = CacheEntry(
            criteria=criteria,
            payload=dict(payload),
            created_at=now,
            last_accessed_at=now,
            access_count=1,
        )
        self._commit(key, entry, previous=self._entries.get(key))
        logger.info("Cached entry %s (total: %d)", key, len(self._entries))
        return entry

    async def clear(self) -> None:
        self._entries.clear()
        logger.info("Cache cleared")

    async def items(self) -> list[tuple[str, CacheEntry]]:
        return list(self._entries.items())

    def _commit(self, key: str, entry: CacheEntry, previous: CacheEntry | None) -> None:
        """Apply one mutation; roll the map back if persisting it fails."""
        self._entries[key] = entry
        try:
            self._persist()
        except Exception:
            if previous is None:
                self._entries.pop(key, None)
            else:
                self._entries[key] = previous
            raise

    def _persist(self) -> None:
        """Hook for durable subclasses."""
