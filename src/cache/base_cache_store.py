# src/cache/base_cache_store.py — v2
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from criteriacache.cache.models import CacheEntry, CacheStats
from criteriacache.criteria.models import NormalizedCriteria


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends.

    get() is a pure lookup. Access bookkeeping happens only through an
    explicit touch() by the caller that serves the hit.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by fingerprint key."""

    @abstractmethod
    async def touch(self, key: str) -> CacheEntry | None:
        """Record one access on an existing entry. Returns None if absent."""

    @abstractmethod
    async def put(
        self, key: str, payload: dict[str, Any], criteria: NormalizedCriteria,
    ) -> CacheEntry:
        """Store a fresh entry (access_count=1), replacing any previous one."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry and the backing storage."""

    @abstractmethod
    async def items(self) -> list[tuple[str, CacheEntry]]:
        """All (key, entry) pairs (for listing, search and export)."""

    async def contains(self, key: str) -> bool:
        return await self.get(key) is not None

    async def list_entries(self) -> list[CacheEntry]:
        return [entry for _, entry in await self.items()]

    async def count(self) -> int:
        return len(await self.items())

    async def stats(self) -> CacheStats:
        """Entry count, summed access counts and the creation time range."""
        entries = await self.list_entries()
        if not entries:
            return CacheStats()
        created = [e.created_at for e in entries]
        return CacheStats(
            total_entries=len(entries),
            total_accesses=sum(e.access_count for e in entries),
            oldest_entry=min(created),
            newest_entry=max(created),
        )
