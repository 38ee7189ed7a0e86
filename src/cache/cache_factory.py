# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from criteriacache.cache.base_cache_store import BaseCacheStore
from criteriacache.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to Settings() (JSON backend).

    Returns:
        Configured BaseCacheStore implementation.
    """
    settings = settings or Settings()
    backend = settings.cache_backend

    if backend == "json":
        from criteriacache.cache.json_store import JsonCacheStore
        return JsonCacheStore(path=settings.results_path)

    if backend == "memory":
        from criteriacache.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    raise ValueError(f"Unsupported cache backend: {backend!r}")
