# src/batch/stats.py — v1
"""Harvest statistics: checkpoint, cache size, error count, success rate."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from criteriacache.cache.models import CacheStats
from criteriacache.storage.models import ProgressCheckpoint

if TYPE_CHECKING:
    from criteriacache.cache.base_cache_store import BaseCacheStore
    from criteriacache.storage.error_log import ErrorLog
    from criteriacache.storage.progress import ProgressStore


class HarvestStats(BaseModel):
    """Snapshot reported by the `stats` command."""

    progress: ProgressCheckpoint | None
    cache: CacheStats
    total_cached_results: int
    total_errors: int
    hit_rate: float


def success_rate(checkpoint: ProgressCheckpoint | None) -> float:
    """Percentage of processed items that ended in the cache."""
    if checkpoint is None:
        return 0.0
    attempted = checkpoint.success_count + checkpoint.error_count
    if not attempted:
        return 0.0
    return round(checkpoint.success_count / attempted * 100.0, 2)


async def collect_stats(
    progress_store: ProgressStore,
    cache_store: BaseCacheStore,
    error_log: ErrorLog,
) -> HarvestStats:
    checkpoint = progress_store.load()
    cache_stats = await cache_store.stats()
    return HarvestStats(
        progress=checkpoint,
        cache=cache_stats,
        total_cached_results=cache_stats.total_entries,
        total_errors=error_log.count(),
        hit_rate=success_rate(checkpoint),
    )
