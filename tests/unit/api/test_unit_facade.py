# tests/unit/api/test_unit_facade.py — v2
"""Tests for api/facade.py — on-demand ResultService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from criteriacache.api.facade import ResultService
from criteriacache.cache.memory_store import MemoryCacheStore
from criteriacache.criteria.models import NormalizedCriteria, Race
from criteriacache.criteria.normalizer import criteria_key, fingerprint
from criteriacache.fetch.retrying_fetcher import FetchError, RetryingFetcher, RetryPolicy


def _service(extractor, cache=None) -> ResultService:
    fetcher = RetryingFetcher(extractor, RetryPolicy(2, 0), sleep=AsyncMock())
    return ResultService(cache if cache is not None else MemoryCacheStore(), fetcher)


class TestGetResults:
    @pytest.mark.asyncio
    async def test_miss_then_hits_count_accesses(self, make_extractor, sample_payload):
        extractor = make_extractor()
        service = _service(extractor)
        raw = {"minAge": 25, "maxAge": 35, "race": "white"}

        first = await service.get_results(raw)
        assert first.from_cache is False
        assert first.access_count == 1
        assert first.cached_at is None
        assert first.results == sample_payload
        assert first.cache_key == criteria_key(raw)

        second = await service.get_results(raw)
        assert second.from_cache is True
        assert second.access_count == 2
        assert second.cached_at is not None

        third = await service.get_results({"min_age": "25", "race": 1})
        assert third.from_cache is True
        assert third.access_count == 3
        assert len(extractor.calls) == 1

    @pytest.mark.asyncio
    async def test_criteria_in_envelope_are_normalized(self, make_extractor):
        envelope = await _service(make_extractor()).get_results({"height": "170"})
        assert envelope.criteria == NormalizedCriteria(min_height=170.0)

    @pytest.mark.asyncio
    async def test_fetch_failure_raises_and_caches_nothing(self, make_extractor):
        cache = MemoryCacheStore()
        service = _service(make_extractor(default=RuntimeError("down")), cache)

        with pytest.raises(FetchError) as exc_info:
            await service.get_results({})
        assert exc_info.value.attempts == 2
        assert await cache.count() == 0


class TestLookup:
    @pytest.mark.asyncio
    async def test_lookup_does_not_touch(self, make_extractor):
        service = _service(make_extractor())
        await service.get_results({})

        item = await service.lookup({})
        assert item is not None
        assert item.entry.access_count == 1
        assert (await service.lookup({})).entry.access_count == 1

    @pytest.mark.asyncio
    async def test_lookup_missing(self, make_extractor):
        assert await _service(make_extractor()).lookup({"minAge": 40}) is None


async def _populated(make_extractor, sample_payload) -> ResultService:
    cache = MemoryCacheStore()
    for criteria in (
        NormalizedCriteria(min_age=20, max_age=30, race=Race.ANY),
        NormalizedCriteria(min_age=30, max_age=40, race=Race.WHITE, min_income=50000),
        NormalizedCriteria(min_age=40, max_age=60, race=Race.WHITE, min_income=100000),
    ):
        await cache.put(fingerprint(criteria), sample_payload, criteria)
    return _service(make_extractor(), cache)


class TestSearch:
    @pytest.mark.asyncio
    async def test_no_filters(self, make_extractor, sample_payload):
        populated = await _populated(make_extractor, sample_payload)
        result = await populated.search()
        assert result.total == result.filtered == 3

    @pytest.mark.asyncio
    async def test_age_filters(self, make_extractor, sample_payload):
        populated = await _populated(make_extractor, sample_payload)
        result = await populated.search(min_age=30, max_age="40")
        assert result.filtered == 1
        assert result.data[0].entry.criteria.min_age == 30

    @pytest.mark.asyncio
    async def test_race_filter(self, make_extractor, sample_payload):
        populated = await _populated(make_extractor, sample_payload)
        assert (await populated.search(race="white")).filtered == 2
        assert (await populated.search(race="any")).filtered == 3

    @pytest.mark.asyncio
    async def test_income_filter(self, make_extractor, sample_payload):
        populated = await _populated(make_extractor, sample_payload)
        result = await populated.search(min_income=60000)
        assert result.filtered == 1
        assert result.total == 3


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_stats_and_clear(self, make_extractor):
        service = _service(make_extractor())
        await service.get_results({})
        await service.get_results({})

        stats = await service.cache_stats()
        assert stats.total_entries == 1
        assert stats.total_accesses == 2

        await service.clear()
        assert await service.list_cached() == []
