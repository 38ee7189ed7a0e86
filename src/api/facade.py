# src/api/facade.py — v2
"""On-demand lookup facade: normalize, serve from cache, or fetch and cache.

Usage:
    service = ResultService(cache_store, fetcher)
    envelope = await service.get_results({"minAge": 25, "race": "white"})

The cache store is constructed by the caller and shared with the batch
harvester; nothing here holds module-level state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from criteriacache.api.models import CachedItem, ResultEnvelope, SearchResult
from criteriacache.batch.models import Combination
from criteriacache.criteria.models import Race
from criteriacache.criteria.normalizer import fingerprint, normalize, normalize_race, parse_int

if TYPE_CHECKING:
    from criteriacache.cache.base_cache_store import BaseCacheStore
    from criteriacache.cache.models import CacheStats
    from criteriacache.fetch.retrying_fetcher import RetryingFetcher

logger = logging.getLogger(__name__)


class ResultService:
    """Lazy per-request caching in front of a RetryingFetcher."""

    def __init__(self, cache_store: BaseCacheStore, fetcher: RetryingFetcher) -> None:
        self._cache_store = cache_store
        self._fetcher = fetcher

    async def get_results(self, raw: Any) -> ResultEnvelope:
        """Return results for raw criteria, fetching only on a cache miss.

        A hit records one access via touch(); a miss fetches, stores a new
        entry with access_count=1 and returns it.

        Raises:
            FetchError: If every fetch attempt failed.
            PersistenceError: If the cache file cannot be written.
        """
        criteria = normalize(raw)
        key = fingerprint(criteria)

        cached = await self._cache_store.get(key)
        if cached is not None:
            touched = await self._cache_store.touch(key) or cached
            logger.info("Cache HIT for %s (access_count=%d)", key, touched.access_count)
            return ResultEnvelope(
                from_cache=True,
                cache_key=key,
                criteria=criteria,
                results=touched.payload,
                cached_at=touched.created_at,
                access_count=touched.access_count,
                timestamp=datetime.now(timezone.utc),
            )

        logger.info("Cache MISS for %s, fetching", key)
        outcome = await self._fetcher.fetch(Combination.from_criteria(criteria))
        if not outcome.ok:
            assert outcome.error is not None
            raise outcome.error

        entry = await self._cache_store.put(key, outcome.payload or {}, criteria)
        return ResultEnvelope(
            from_cache=False,
            cache_key=key,
            criteria=criteria,
            results=entry.payload,
            access_count=entry.access_count,
            timestamp=datetime.now(timezone.utc),
        )

    async def lookup(self, raw: Any) -> CachedItem | None:
        """Cache-only lookup without access bookkeeping or fetching."""
        key = fingerprint(normalize(raw))
        entry = await self._cache_store.get(key)
        return CachedItem(key=key, entry=entry) if entry is not None else None

    async def list_cached(self) -> list[CachedItem]:
        return [CachedItem(key=k, entry=e) for k, e in await self._cache_store.items()]

    async def search(
        self,
        min_age: Any = None,
        max_age: Any = None,
        race: Any = None,
        min_income: Any = None,
    ) -> SearchResult:
        """Filter cached entries.

        min_age keeps entries with criteria.min_age >= value, max_age keeps
        criteria.max_age <= value, min_income keeps criteria.min_income >=
        value. race filters on the normalized code unless it is "any".
        Unparseable filter values are ignored.
        """
        everything = await self.list_cached()
        filtered = everything

        lo = parse_int(min_age, 0) if min_age else None
        hi = parse_int(max_age, 0) if max_age else None
        income = parse_int(min_income, 0) if min_income else None
        race_code = normalize_race(race) if race is not None else Race.ANY

        if lo:
            filtered = [i for i in filtered if i.entry.criteria.min_age >= lo]
        if hi:
            filtered = [i for i in filtered if i.entry.criteria.max_age <= hi]
        if race_code is not Race.ANY:
            filtered = [i for i in filtered if i.entry.criteria.race == race_code]
        if income:
            filtered = [i for i in filtered if i.entry.criteria.min_income >= income]

        return SearchResult(total=len(everything), filtered=len(filtered), data=filtered)

    async def cache_stats(self) -> CacheStats:
        return await self._cache_store.stats()

    async def clear(self) -> None:
        await self._cache_store.clear()
