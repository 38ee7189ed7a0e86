# src/api/models.py — v2
"""API-level models returned by the on-demand ResultService."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from criteriacache.cache.models import CacheEntry
from criteriacache.criteria.models import NormalizedCriteria


class ResultEnvelope(BaseModel):
    """Response for one criteria lookup."""

    success: bool = True
    from_cache: bool
    cache_key: str
    criteria: NormalizedCriteria
    results: dict[str, Any]
    cached_at: datetime | None = None
    access_count: int | None = None
    timestamp: datetime


class CachedItem(BaseModel):
    """A cache entry together with its key (listing and search)."""

    key: str
    entry: CacheEntry


class SearchResult(BaseModel):
    """Filtered view over the cache."""

    total: int
    filtered: int
    data: list[CachedItem] = Field(default_factory=list)
