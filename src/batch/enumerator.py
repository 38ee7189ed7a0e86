# src/batch/enumerator.py — v1
"""Resumable, throttled harvest of the whole parameter space.

Workflow per run:
    1. Load the progress checkpoint (or start one at index 0)
    2. Walk the space from current_index in fixed-size batches
    3. Per item: skip if cached, else fetch and put; save the checkpoint
    4. Sleep between fetched items and between batches

A crash loses at most the in-flight item: results are put before the
checkpoint advances, and already cached items are never refetched.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
import uuid
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from criteriacache.batch.models import Combination, ParameterGrid, RunSummary
from criteriacache.batch.space import count_space, iter_space
from criteriacache.logging.context import set_run_context

if TYPE_CHECKING:
    from criteriacache.cache.base_cache_store import BaseCacheStore
    from criteriacache.config.settings import Settings
    from criteriacache.fetch.retrying_fetcher import RetryingFetcher
    from criteriacache.storage.models import ProgressCheckpoint
    from criteriacache.storage.progress import ProgressStore

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


def generate_run_id(timestamp: datetime | None = None) -> str:
    """Generate a run_id: yyyymmdd_hhmm_{uuid4_short}."""
    ts = timestamp or datetime.now(timezone.utc)
    return f"{ts.strftime('%Y%m%d_%H%M')}_{uuid.uuid4().hex[:5]}"


def _batched(items: Iterable[Combination], size: int) -> Iterator[list[Combination]]:
    iterator = iter(items)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            return
        yield batch


class BatchEnumerator:
    """Drive a resumable traversal of the parameter space into the cache."""

    def __init__(
        self,
        grid: ParameterGrid,
        cache_store: BaseCacheStore,
        fetcher: RetryingFetcher,
        progress_store: ProgressStore,
        batch_size: int = 10,
        item_delay_s: float = 3.0,
        batch_delay_s: float = 10.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._grid = grid
        self._cache_store = cache_store
        self._fetcher = fetcher
        self._progress_store = progress_store
        self._batch_size = batch_size
        self._item_delay_s = item_delay_s
        self._batch_delay_s = batch_delay_s
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache_store: BaseCacheStore,
        fetcher: RetryingFetcher,
        progress_store: ProgressStore,
        sleep: SleepFn = asyncio.sleep,
    ) -> BatchEnumerator:
        return cls(
            grid=ParameterGrid.from_settings(settings),
            cache_store=cache_store,
            fetcher=fetcher,
            progress_store=progress_store,
            batch_size=settings.batch_size,
            item_delay_s=settings.item_delay_s,
            batch_delay_s=settings.batch_delay_s,
            sleep=sleep,
        )

    @property
    def space_size(self) -> int:
        return count_space(self._grid)

    async def run(self, max_items: int | None = None, reset: bool = False) -> RunSummary:
        """Process the space from the stored checkpoint to the end.

        Args:
            max_items: Stop after this many items (None = no limit).
            reset: Discard the stored checkpoint and start at index 0.
                Cached combinations are still skipped.

        Returns:
            RunSummary. successes/errors are cumulative over the checkpoint;
            processed/skipped/fetched count this invocation only.

        Raises:
            PersistenceError: If the cache, checkpoint or error log cannot be
                written. The run stops; the checkpoint still points at the
                first unfinished item.
        """
        t0 = time.perf_counter()
        total = self.space_size
        if reset:
            self._progress_store.reset()
        checkpoint = self._progress_store.load_or_init(total)
        start_index = checkpoint.current_index

        set_run_context(generate_run_id())
        logger.info(
            "Starting harvest at index %d: %d/%d processed (%.2f%%), %d successes, %d errors",
            start_index, checkpoint.processed_count, total,
            checkpoint.completion_percentage, checkpoint.success_count,
            checkpoint.error_count,
        )

        processed = skipped = fetched = 0
        error_messages: list[str] = []
        index = start_index
        limit_reached = max_items is not None and max_items <= 0
        total_batches = -(-total // self._batch_size)

        if not limit_reached:
            for batch in _batched(iter_space(self._grid, start_index), self._batch_size):
                batch_start = index
                logger.info(
                    "Processing batch %d/%d (combinations %d to %d)",
                    batch_start // self._batch_size + 1, total_batches,
                    batch_start + 1, batch_start + len(batch),
                )
                fetched_in_batch = 0

                for position, combination in enumerate(batch):
                    was_fetched = await self._process_item(
                        combination, checkpoint, error_messages,
                    )
                    index += 1
                    processed += 1
                    if was_fetched:
                        fetched += 1
                        fetched_in_batch += 1
                    else:
                        skipped += 1

                    checkpoint.processed_count += 1
                    checkpoint.current_index = index
                    checkpoint.last_processed_at = datetime.now(timezone.utc)
                    self._progress_store.save(checkpoint)

                    if max_items is not None and processed >= max_items:
                        limit_reached = True
                        break
                    if was_fetched and position < len(batch) - 1:
                        await self._sleep(self._item_delay_s)

                if limit_reached:
                    logger.info("Item limit %s reached at index %d", max_items, index)
                    break
                if fetched_in_batch and index < total:
                    logger.info(
                        "Batch complete, waiting %.1fs before next batch", self._batch_delay_s,
                    )
                    await self._sleep(self._batch_delay_s)

        summary = RunSummary(
            total_combinations=total,
            processed=processed,
            successes=checkpoint.success_count,
            errors=checkpoint.error_count,
            skipped=skipped,
            fetched=fetched,
            start_index=start_index,
            end_index=index,
            completed=index >= total,
            duration_seconds=round(time.perf_counter() - t0, 2),
            error_messages=error_messages,
        )
        if summary.completed:
            logger.info(
                "Harvest complete: %d successes, %d errors (%.2f%% success rate)",
                summary.successes, summary.errors, summary.success_rate,
            )
        return summary

    async def _process_item(
        self,
        combination: Combination,
        checkpoint: ProgressCheckpoint,
        error_messages: list[str],
    ) -> bool:
        """Handle one combination. Returns True if the extractor was called."""
        key = combination.fingerprint
        if await self._cache_store.contains(key):
            logger.debug("Skipping already cached %s", combination.id)
            checkpoint.success_count += 1
            return False

        outcome = await self._fetcher.fetch(combination)
        if outcome.ok:
            await self._cache_store.put(key, outcome.payload or {}, combination.params)
            checkpoint.success_count += 1
        else:
            checkpoint.error_count += 1
            error_messages.append(str(outcome.error))
        return True
