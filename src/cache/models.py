# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from criteriacache.criteria.models import NormalizedCriteria


class CacheEntry(BaseModel):
    """One cached result, keyed by the fingerprint of its criteria."""

    criteria: NormalizedCriteria
    payload: dict[str, Any]
    created_at: datetime
    last_accessed_at: datetime
    access_count: int = Field(default=1, ge=1)


class CacheStats(BaseModel):
    """Aggregate view over all cache entries."""

    total_entries: int = 0
    total_accesses: int = 0
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None
